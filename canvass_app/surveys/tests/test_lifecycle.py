from datetime import date, datetime, timedelta

import pytest
from django.utils import timezone

from canvass_app.contacts.models import Contact
from canvass_app.surveys.lifecycle import end_of_day, reactivation_status, resolve_status
from canvass_app.surveys.models import Survey, SurveyRecipient

START = date(2026, 3, 1)
END = date(2026, 3, 3)


def aware(*args):
    return timezone.make_aware(datetime(*args))


@pytest.mark.parametrize("requested", ["draft", None, "", "completed"])
@pytest.mark.parametrize(
    "now",
    [aware(2026, 2, 1), aware(2026, 3, 2, 12), aware(2026, 4, 1)],
)
def test_anything_but_active_resolves_to_draft(requested, now):
    assert resolve_status(requested, START, END, now) == "draft"


@pytest.mark.parametrize(
    "now",
    [
        aware(2026, 3, 1, 0, 0, 0),
        aware(2026, 3, 2, 12),
        aware(2026, 3, 3, 23, 59, 59, 999999),
    ],
)
def test_active_inside_inclusive_window(now):
    assert resolve_status("active", START, END, now) == "active"


def test_active_after_end_of_day_is_completed():
    assert resolve_status("active", START, END, aware(2026, 3, 4, 0, 0, 0)) == "completed"


def test_active_before_start_of_day_stays_draft():
    now = aware(2026, 3, 1) - timedelta(microseconds=1)
    assert resolve_status("active", START, END, now) == "draft"


def test_single_day_window():
    day = date(2026, 5, 10)
    assert resolve_status("active", day, day, aware(2026, 5, 10, 18)) == "active"
    assert resolve_status("active", day, day, aware(2026, 5, 11, 0, 1)) == "completed"


def test_naive_clock_is_compared_as_is():
    assert resolve_status("active", START, END, datetime(2026, 3, 2, 9)) == "active"
    assert resolve_status("active", START, END, datetime(2026, 2, 28, 9)) == "draft"


def test_end_of_day_is_last_microsecond():
    moment = end_of_day(END)
    assert moment == datetime(2026, 3, 3, 23, 59, 59, 999999)


@pytest.mark.django_db
class TestReactivationStatus:
    def make_survey(self, user, **kwargs):
        today = timezone.localdate()
        defaults = {
            "owner": user,
            "name": "S",
            "trigger_word": "REACT",
            "start_date": today - timedelta(days=1),
            "end_date": today + timedelta(days=2),
            "status": Survey.Status.CANCELLED,
        }
        defaults.update(kwargs)
        return Survey.objects.create(**defaults)

    def test_without_dispatch_returns_to_draft(self, django_user_model):
        user = django_user_model.objects.create_user(username="u", password="x")
        survey = self.make_survey(user)
        assert reactivation_status(survey) == "draft"

    def test_with_dispatch_inside_window_is_active(self, django_user_model):
        user = django_user_model.objects.create_user(username="u", password="x")
        survey = self.make_survey(user)
        contact = Contact.objects.create(owner=user, names="A", phone="0700000001")
        SurveyRecipient.objects.create(
            survey=survey, contact=contact, sent_at=timezone.now()
        )
        assert reactivation_status(survey) == "active"

    def test_with_dispatch_after_window_is_completed(self, django_user_model):
        user = django_user_model.objects.create_user(username="u", password="x")
        today = timezone.localdate()
        survey = self.make_survey(
            user,
            start_date=today - timedelta(days=10),
            end_date=today - timedelta(days=2),
        )
        contact = Contact.objects.create(owner=user, names="A", phone="0700000001")
        SurveyRecipient.objects.create(
            survey=survey, contact=contact, sent_at=timezone.now()
        )
        assert reactivation_status(survey) == "completed"
