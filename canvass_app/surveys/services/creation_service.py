"""
Survey creation service.

Turns validated builder input into a persisted survey with its questions,
options and recipient links. The whole aggregate is written in a single
transaction; any failure leaves no trace of the survey behind.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from django.db import transaction

from ..branching import clean_branching, normalize_branching, option_targets
from ..lifecycle import resolve_status
from ..models import QuestionOption, Survey, SurveyQuestion, SurveyRecipient

logger = logging.getLogger(__name__)


class SurveyCreationService:
    """Create surveys from validated input.

    ``data`` uses the keys produced by ``SurveyCreateSerializer``:
    name, description, start_date, end_date, trigger_word,
    completion_message, invitation_message, schedule_time, status,
    questions and recipients (a list of contact ids).
    """

    @classmethod
    def create(cls, data: dict[str, Any], owner, now: datetime | None = None) -> Survey:
        requested_status = data.get("status") or Survey.Status.DRAFT
        status = resolve_status(
            requested_status, data["start_date"], data["end_date"], now
        )

        with transaction.atomic():
            survey = Survey.objects.create(
                owner=owner,
                name=data["name"],
                description=data.get("description") or "",
                start_date=data["start_date"],
                end_date=data["end_date"],
                trigger_word=data["trigger_word"],
                completion_message=data.get("completion_message"),
                invitation_message=data.get("invitation_message") or "",
                scheduled_time=data.get("schedule_time"),
                status=status,
            )

            for index, question_data in enumerate(data["questions"]):
                cls._create_question(survey, index, question_data)

            sent_at = (
                data.get("schedule_time")
                if requested_status == Survey.Status.ACTIVE
                else None
            )
            contact_ids = dict.fromkeys(data.get("recipients") or [])
            SurveyRecipient.objects.bulk_create(
                [
                    SurveyRecipient(survey=survey, contact_id=contact_id, sent_at=sent_at)
                    for contact_id in contact_ids
                ]
            )

        logger.info(
            "Created survey %s (%s) for user %s: status=%s requested=%s recipients=%d",
            survey.id,
            survey.trigger_word,
            owner.pk,
            status,
            requested_status,
            len(contact_ids),
        )
        return survey

    @staticmethod
    def _create_question(
        survey: Survey, index: int, question_data: dict[str, Any]
    ) -> SurveyQuestion:
        raw_branching = clean_branching(question_data.get("branching"))
        response_type = question_data["response_type"]

        question = SurveyQuestion.objects.create(
            survey=survey,
            text=question_data["text"],
            response_type=response_type,
            free_text_description=question_data.get("free_text_description"),
            allow_multiple=bool(question_data.get("allow_multiple", False)),
            order=index,
            branching=normalize_branching(raw_branching),
        )

        if response_type != SurveyQuestion.ResponseType.MULTIPLE_CHOICE:
            return question

        targets = option_targets(raw_branching)
        for option_index, option_text in enumerate(question_data.get("options") or []):
            if not (option_text or "").strip():
                continue
            QuestionOption.objects.create(
                question=question,
                text=option_text,
                order=option_index,
                branching=normalize_branching(targets.get(option_index)),
            )
        return question
