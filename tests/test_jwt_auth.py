import json
import pytest
from datetime import date
from django.contrib.auth import get_user_model
from canvass_app.surveys.models import Survey


User = get_user_model()
TEST_PASSWORD = "test-pass"


@pytest.mark.django_db
class TestJWTEnforcement:
    def setup_data(self):
        owner = User.objects.create_user(username="owner2", password=TEST_PASSWORD)
        survey = Survey.objects.create(
            owner=owner,
            name="Jwt S",
            trigger_word="JWT-S",
            start_date=date(2026, 3, 1),
            end_date=date(2026, 3, 31),
        )
        return owner, survey

    def test_missing_token_behaviour(self, client):
        _, survey = self.setup_data()

        resp = client.get("/api/surveys/")
        assert resp.status_code == 401

        resp = client.get(f"/api/surveys/{survey.id}/")
        assert resp.status_code == 401

        resp = client.post(
            "/api/surveys/",
            data=json.dumps({"name": "New", "trigger_word": "JWT-NEW"}),
            content_type="application/json",
        )
        assert resp.status_code == 401

        resp = client.post(f"/api/surveys/{survey.id}/cancel/")
        assert resp.status_code == 401
        survey.refresh_from_db()
        assert survey.status == Survey.Status.DRAFT

    def test_invalid_token_returns_401(self, client):
        _, survey = self.setup_data()
        invalid_hdrs = {"HTTP_AUTHORIZATION": "Bearer invalid.token.here"}

        resp = client.get("/api/surveys/", **invalid_hdrs)
        assert resp.status_code == 401

        resp = client.get(f"/api/surveys/{survey.id}/", **invalid_hdrs)
        assert resp.status_code == 401

        resp = client.get("/api/contacts/", **invalid_hdrs)
        assert resp.status_code == 401

    def test_refresh_flow(self, client):
        """Basic happy-path for JWT obtain and refresh."""
        User.objects.create_user(username="jwtuser", password=TEST_PASSWORD)

        obtain = client.post(
            "/api/token",
            data=json.dumps({"username": "jwtuser", "password": TEST_PASSWORD}),
            content_type="application/json",
        )
        assert obtain.status_code == 200
        tokens = obtain.json()
        assert "access" in tokens and "refresh" in tokens

        hdrs = {"HTTP_AUTHORIZATION": f"Bearer {tokens['access']}"}
        resp = client.get("/api/surveys/", **hdrs)
        assert resp.status_code == 200

        refresh = client.post(
            "/api/token/refresh",
            data=json.dumps({"refresh": tokens["refresh"]}),
            content_type="application/json",
        )
        assert refresh.status_code == 200
        new_access = refresh.json()["access"]
        hdrs2 = {"HTTP_AUTHORIZATION": f"Bearer {new_access}"}
        resp2 = client.get("/api/contacts/", **hdrs2)
        assert resp2.status_code == 200

    def test_token_wrong_credentials_returns_401(self, client):
        """Wrong password should yield 401 Unauthorized from /api/token."""
        User.objects.create_user(username="baduser", password=TEST_PASSWORD)
        resp = client.post(
            "/api/token",
            data=json.dumps({"username": "baduser", "password": "wrong-password"}),
            content_type="application/json",
        )
        assert resp.status_code == 401
