from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import models
from django.db.models import F, Q

from canvass_app.contacts.models import Contact

User = get_user_model()


class Survey(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        ACTIVE = "active", "Active"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="surveys")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    start_date = models.DateField()
    # Inclusive: the survey runs until the end of this day
    end_date = models.DateField()
    trigger_word = models.CharField(max_length=50, unique=True)
    completion_message = models.TextField(null=True, blank=True)
    invitation_message = models.TextField(blank=True, default="")
    scheduled_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.DRAFT
    )
    contacts = models.ManyToManyField(
        Contact, through="SurveyRecipient", related_name="surveys", blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="survey_end_date_not_before_start_date",
            )
        ]
        indexes = [
            models.Index(
                fields=["status", "start_date", "end_date"],
                name="survey_status_window_idx",
            )
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def has_dispatched_recipients(self) -> bool:
        return self.recipients.filter(sent_at__isnull=False).exists()

    def is_editable(self) -> bool:
        """Questions can change only while nothing has been sent out."""
        return self.status == self.Status.DRAFT and not self.has_dispatched_recipients()


class SurveyQuestion(models.Model):
    class ResponseType(models.TextChoices):
        FREE_TEXT = "free-text", "Free text"
        MULTIPLE_CHOICE = "multiple-choice", "Multiple choice"

    survey = models.ForeignKey(
        Survey, on_delete=models.CASCADE, related_name="questions"
    )
    text = models.TextField()
    response_type = models.CharField(max_length=20, choices=ResponseType.choices)
    free_text_description = models.TextField(null=True, blank=True)
    allow_multiple = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)
    # Canonical branching value, see surveys.branching
    branching = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return self.text


class QuestionOption(models.Model):
    question = models.ForeignKey(
        SurveyQuestion, on_delete=models.CASCADE, related_name="options"
    )
    text = models.CharField(max_length=255)
    # Position in the submitted options list; blank entries leave gaps
    order = models.PositiveIntegerField(default=0)
    branching = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return self.text


class SurveyRecipient(models.Model):
    survey = models.ForeignKey(
        Survey, on_delete=models.CASCADE, related_name="recipients"
    )
    contact = models.ForeignKey(
        Contact, on_delete=models.CASCADE, related_name="survey_links"
    )
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["survey", "contact"],
                name="one_link_per_contact_per_survey",
            )
        ]
        indexes = [
            models.Index(fields=["survey", "sent_at"], name="recipient_survey_sent_idx"),
        ]
