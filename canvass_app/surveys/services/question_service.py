"""
Question editing for surveys that have not gone out yet.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction

from ..models import QuestionOption, SurveyQuestion

logger = logging.getLogger(__name__)


class QuestionEditService:
    """Rewrite a question of an unpublished draft survey in place."""

    @classmethod
    def update(cls, question: SurveyQuestion, data: dict[str, Any]) -> SurveyQuestion:
        """Apply ``data`` to ``question`` and rebuild its options.

        Options are trimmed, blanks dropped and the rest renumbered from
        zero. Rebuilt options start without branching; the question's own
        branching is left as it was.
        """
        response_type = data["response_type"]
        is_choice = response_type == SurveyQuestion.ResponseType.MULTIPLE_CHOICE

        with transaction.atomic():
            question.text = data["text"]
            question.response_type = response_type
            question.allow_multiple = bool(data.get("allow_multiple")) if is_choice else False
            question.free_text_description = (
                None if is_choice else (data.get("free_text_description") or "")
            )
            question.save(
                update_fields=[
                    "text",
                    "response_type",
                    "allow_multiple",
                    "free_text_description",
                ]
            )

            question.options.all().delete()
            if is_choice:
                texts = [t.strip() for t in data.get("options") or [] if (t or "").strip()]
                QuestionOption.objects.bulk_create(
                    [
                        QuestionOption(question=question, text=text, order=index, branching=None)
                        for index, text in enumerate(texts)
                    ]
                )

        logger.info(
            "Updated question %s of survey %s (%s)",
            question.pk,
            question.survey_id,
            response_type,
        )
        return question
