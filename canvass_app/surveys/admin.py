from django.contrib import admin

from .models import QuestionOption, Survey, SurveyQuestion, SurveyRecipient


class SurveyQuestionInline(admin.TabularInline):
    model = SurveyQuestion
    extra = 0
    fields = ("order", "text", "response_type", "allow_multiple", "branching")


class SurveyRecipientInline(admin.TabularInline):
    model = SurveyRecipient
    extra = 0
    raw_id_fields = ("contact",)
    fields = ("contact", "sent_at")


@admin.register(Survey)
class SurveyAdmin(admin.ModelAdmin):
    list_display = ("name", "trigger_word", "status", "start_date", "end_date", "owner")
    list_filter = ("status",)
    search_fields = ("name", "trigger_word")
    inlines = [SurveyQuestionInline, SurveyRecipientInline]


class QuestionOptionInline(admin.TabularInline):
    model = QuestionOption
    extra = 0


@admin.register(SurveyQuestion)
class SurveyQuestionAdmin(admin.ModelAdmin):
    list_display = ("text", "survey", "response_type", "order")
    list_filter = ("response_type",)
    inlines = [QuestionOptionInline]
