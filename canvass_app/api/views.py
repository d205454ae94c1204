import logging

from django.db import IntegrityError
from django.db.models import Count, Q
from rest_framework import mixins, permissions, serializers, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.generics import get_object_or_404
from rest_framework.response import Response

from canvass_app.contacts.models import Contact
from canvass_app.surveys.branching import is_numeric_target
from canvass_app.surveys.lifecycle import reactivation_status
from canvass_app.surveys.models import QuestionOption, Survey, SurveyQuestion
from canvass_app.surveys.services import QuestionEditService, SurveyCreationService

logger = logging.getLogger(__name__)


class IsOwner(permissions.BasePermission):
    def has_object_permission(self, request, view, obj):
        return getattr(obj, "owner_id", None) == getattr(request.user, "id", None)


class ContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = Contact
        fields = ["id", "names", "phone", "email", "gender", "created_at"]
        read_only_fields = ["created_at"]

    def validate_email(self, value):
        # Blank and missing emails are both stored as null
        return value or None


class ContactViewSet(viewsets.ModelViewSet):
    serializer_class = ContactSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwner]

    def get_queryset(self):
        return Contact.objects.filter(owner=self.request.user)

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)


class BranchingField(serializers.Field):
    """Accepts a question index, ``-1`` (end survey), a list or a mapping."""

    default_error_messages = {
        "invalid": "Branching must be a question index, a list or a mapping.",
    }

    def to_internal_value(self, data):
        if isinstance(data, bool):
            self.fail("invalid")
        if isinstance(data, (int, list, dict)):
            return data
        if isinstance(data, str):
            if is_numeric_target(data):
                return data.strip()
        self.fail("invalid")

    def to_representation(self, value):
        return value


class QuestionInputSerializer(serializers.Serializer):
    text = serializers.CharField()
    response_type = serializers.ChoiceField(choices=SurveyQuestion.ResponseType.choices)
    options = serializers.ListField(
        child=serializers.CharField(allow_blank=True, max_length=255),
        required=False,
        default=list,
    )
    allow_multiple = serializers.BooleanField(required=False, default=False)
    free_text_description = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None
    )
    branching = BranchingField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["response_type"] == SurveyQuestion.ResponseType.MULTIPLE_CHOICE:
            if not any(option.strip() for option in attrs["options"]):
                raise serializers.ValidationError(
                    {"options": "At least one option is required for multiple choice questions."}
                )
        return attrs


class SurveyCreateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[Survey.Status.DRAFT, Survey.Status.ACTIVE],
        required=False,
        allow_null=True,
        default=Survey.Status.DRAFT,
    )
    name = serializers.CharField(max_length=255)
    description = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    trigger_word = serializers.CharField(max_length=50)
    completion_message = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None
    )
    invitation_message = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None
    )
    schedule_time = serializers.DateTimeField(required=False, allow_null=True, default=None)
    questions = QuestionInputSerializer(many=True, allow_empty=False)
    recipients = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list
    )

    def validate_trigger_word(self, value):
        value = value.strip()
        if Survey.objects.filter(trigger_word__iexact=value).exists():
            raise serializers.ValidationError("This trigger word is already in use.")
        return value

    def validate_recipients(self, value):
        user = self.context["request"].user
        owned = set(
            Contact.objects.filter(owner=user, id__in=value).values_list("id", flat=True)
        )
        if any(contact_id not in owned for contact_id in value):
            raise serializers.ValidationError(
                "Each selected recipient must belong to your account."
            )
        return value

    def validate(self, attrs):
        attrs["status"] = attrs.get("status") or Survey.Status.DRAFT
        errors = {}
        if attrs["end_date"] < attrs["start_date"]:
            errors["end_date"] = "End date cannot be before the start date."
        if attrs["status"] == Survey.Status.ACTIVE:
            required = "This field is required when publishing a survey."
            if not attrs.get("invitation_message"):
                errors["invitation_message"] = required
            if attrs.get("schedule_time") is None:
                errors["schedule_time"] = required
            if not attrs.get("recipients"):
                errors["recipients"] = required
        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class QuestionOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuestionOption
        fields = ["id", "text", "order", "branching"]


class SurveyQuestionSerializer(serializers.ModelSerializer):
    options = QuestionOptionSerializer(many=True, read_only=True)

    class Meta:
        model = SurveyQuestion
        fields = [
            "id",
            "text",
            "response_type",
            "free_text_description",
            "allow_multiple",
            "order",
            "branching",
            "options",
        ]


class SurveySummarySerializer(serializers.ModelSerializer):
    question_count = serializers.IntegerField(read_only=True)
    recipient_count = serializers.IntegerField(read_only=True)
    sent_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Survey
        fields = [
            "id",
            "name",
            "status",
            "question_count",
            "recipient_count",
            "sent_count",
            "created_at",
        ]


class SurveyDetailSerializer(SurveySummarySerializer):
    questions = SurveyQuestionSerializer(many=True, read_only=True)

    class Meta(SurveySummarySerializer.Meta):
        fields = SurveySummarySerializer.Meta.fields + [
            "description",
            "start_date",
            "end_date",
            "trigger_word",
            "completion_message",
            "invitation_message",
            "scheduled_time",
            "updated_at",
            "questions",
        ]


def creation_message(requested_status: str, survey: Survey) -> str:
    if requested_status != Survey.Status.ACTIVE:
        return "Survey saved as draft successfully!"
    if survey.status == Survey.Status.ACTIVE:
        return "Survey published successfully!"
    if survey.status == Survey.Status.COMPLETED:
        return "Survey published, but its end date has already passed."
    return "Survey scheduled successfully. It will become active on the start date."


class SurveyViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [permissions.IsAuthenticated, IsOwner]

    def get_queryset(self):
        queryset = Survey.objects.filter(owner=self.request.user).annotate(
            question_count=Count("questions", distinct=True),
            recipient_count=Count("recipients", distinct=True),
            sent_count=Count(
                "recipients",
                filter=Q(recipients__sent_at__isnull=False),
                distinct=True,
            ),
        )
        if self.action == "retrieve":
            queryset = queryset.prefetch_related("questions__options")
        return queryset

    def get_serializer_class(self):
        if self.action == "create":
            return SurveyCreateSerializer
        if self.action == "retrieve":
            return SurveyDetailSerializer
        return SurveySummarySerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            survey = SurveyCreationService.create(data, request.user)
        except IntegrityError as e:
            logger.warning(
                "Survey creation for user %s hit an integrity error (trigger word %s): %s",
                request.user.pk,
                data["trigger_word"],
                e,
            )
            raise serializers.ValidationError(self._integrity_errors(data))

        survey = self.get_queryset().get(pk=survey.pk)
        payload = SurveySummarySerializer(survey).data
        payload["message"] = creation_message(data["status"], survey)
        return Response(payload, status=status.HTTP_201_CREATED)

    @staticmethod
    def _integrity_errors(data):
        # Work out which concurrent change beat validation to the insert
        if Survey.objects.filter(trigger_word=data["trigger_word"]).exists():
            return {"trigger_word": ["This trigger word is already in use."]}
        recipients = set(data.get("recipients") or [])
        if Contact.objects.filter(id__in=recipients).count() != len(recipients):
            return {"recipients": ["One or more selected recipients no longer exist."]}
        return {"non_field_errors": ["The survey could not be saved. Please try again."]}

    def perform_destroy(self, instance):
        logger.info("Survey %s deleted by user %s", instance.pk, self.request.user.pk)
        instance.delete()

    @action(
        detail=True,
        methods=["put", "patch"],
        url_path=r"questions/(?P<question_pk>[^/.]+)",
    )
    def update_question(self, request, pk=None, question_pk=None):
        survey = self.get_object()
        question = get_object_or_404(survey.questions.all(), pk=question_pk)
        if not survey.is_editable():
            raise PermissionDenied("Only unpublished draft surveys can be edited.")

        serializer = QuestionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        question = QuestionEditService.update(question, serializer.validated_data)
        return Response(SurveyQuestionSerializer(question).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        survey = self.get_object()
        if survey.status in (Survey.Status.COMPLETED, Survey.Status.CANCELLED):
            return Response(
                {"detail": "This survey cannot be cancelled."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        survey.status = Survey.Status.CANCELLED
        survey.save(update_fields=["status", "updated_at"])
        logger.info("Survey %s cancelled by user %s", survey.pk, request.user.pk)
        return Response(SurveySummarySerializer(survey).data)

    @action(detail=True, methods=["post"])
    def reactivate(self, request, pk=None):
        survey = self.get_object()
        if survey.status != Survey.Status.CANCELLED:
            return Response(
                {"detail": "Only cancelled surveys can be reactivated."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        survey.status = reactivation_status(survey)
        survey.save(update_fields=["status", "updated_at"])
        logger.info(
            "Survey %s reactivated by user %s as %s",
            survey.pk,
            request.user.pk,
            survey.status,
        )
        return Response(SurveySummarySerializer(survey).data)


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def healthcheck(request):
    return Response({"status": "ok"})
