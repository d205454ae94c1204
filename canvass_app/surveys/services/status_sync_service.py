"""
Status synchronisation for surveys.

Keeps survey statuses in step with the calendar. Only surveys that have
started dispatching invitations (at least one recipient with ``sent_at``)
are moved automatically; everything else is left for its owner to publish.
"""

from __future__ import annotations

import logging
from datetime import date

from django.db.models import QuerySet
from django.utils import timezone

from ..models import Survey, SurveyRecipient

logger = logging.getLogger(__name__)


class StatusSyncService:
    """Set-based status transitions, safe to run any number of times a day."""

    @staticmethod
    def dispatched_surveys() -> QuerySet[Survey]:
        dispatched = SurveyRecipient.objects.filter(sent_at__isnull=False).values(
            "survey_id"
        )
        return Survey.objects.filter(pk__in=dispatched)

    @classmethod
    def activation_queryset(cls, today: date) -> QuerySet[Survey]:
        return cls.dispatched_surveys().filter(
            status=Survey.Status.DRAFT,
            start_date__lte=today,
            end_date__gte=today,
        )

    @classmethod
    def completion_queryset(cls, today: date) -> QuerySet[Survey]:
        return cls.dispatched_surveys().filter(
            status__in=[Survey.Status.DRAFT, Survey.Status.ACTIVE],
            end_date__lt=today,
        )

    @classmethod
    def sync(cls, today: date | None = None) -> dict[str, int]:
        """Activate and complete surveys for ``today``.

        Returns:
            Dictionary with counts of activated and completed surveys
        """
        if today is None:
            today = timezone.localdate()
        now = timezone.now()

        activated = cls.activation_queryset(today).update(
            status=Survey.Status.ACTIVE, updated_at=now
        )
        completed = cls.completion_queryset(today).update(
            status=Survey.Status.COMPLETED, updated_at=now
        )

        logger.info(
            "Survey status sync for %s: activated=%d completed=%d",
            today,
            activated,
            completed,
        )
        return {"activated": activated, "completed": completed}
