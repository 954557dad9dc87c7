"""Tests for the newsletter fan-out and the signup notification relays."""
import json

import httpx
import pytest

from namsan_portal.db import Newsletter, Profile, UserRole

ADMIN = {"id": "admin-1", "email": "admin@namsan.test"}
MEMBER = {"id": "member-1", "email": "member@example.com"}
NEWSLETTER = {"subject": "Weekly market letter", "htmlContent": "<p>Markets were calm.</p>"}


@pytest.fixture
def as_user(auth_upstream):
    """Make the auth API resolve any bearer to the given user."""

    def use(user):
        auth_upstream.reply(200, json=user)

    return use


@pytest.fixture
def admin_role(store):
    store.table(UserRole).insert([{"user_id": ADMIN["id"], "role": "admin"}])


@pytest.fixture
def profiles(store):
    store.table(Profile).insert(
        [
            {"user_id": "u-a", "email": "a@example.com", "is_approved": True},
            {"user_id": "u-b", "email": "b@example.com", "is_approved": True},
            {"user_id": "u-c", "email": "c@example.com", "is_approved": True},
            {"user_id": "u-d", "email": "d@example.com", "is_approved": False},
        ]
    )


def post_newsletter(client, body=None):
    return client.post(
        "/send-newsletter", json=body or NEWSLETTER, headers={"Authorization": "Bearer opaque"}
    )


class TestSendNewsletter:
    def test_rejected_token(self, client, auth_upstream):
        auth_upstream.reply(401, json={"msg": "invalid JWT"})

        response = post_newsletter(client)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_non_admin_is_forbidden(self, client, as_user, profiles, resend_upstream):
        as_user(MEMBER)

        response = post_newsletter(client)

        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required"}
        assert resend_upstream.requests == []

    def test_sends_one_message_per_approved_recipient(
        self, client, as_user, admin_role, profiles, resend_upstream, store
    ):
        as_user(ADMIN)
        (draft,) = store.table(Newsletter).insert([{"subject": NEWSLETTER["subject"]}])

        def resend(request):
            if json.loads(request.content)["to"] == ["b@example.com"]:
                return httpx.Response(500, json={"message": "mailbox unavailable"})
            return httpx.Response(200, json={"id": "email-ok"})

        resend_upstream.handler = resend

        response = post_newsletter(client, {**NEWSLETTER, "newsletterId": draft.id})

        assert response.status_code == 200
        assert response.json() == {"success": True, "sentCount": 2, "totalRecipients": 3}

        sent = resend_upstream.bodies()
        assert sorted(b["to"][0] for b in sent) == ["a@example.com", "b@example.com", "c@example.com"]
        assert all(len(b["to"]) == 1 for b in sent)
        assert sent[0]["from"] == "Namsan Partners <newsletter@namsan-partners.com>"
        assert sent[0]["subject"] == NEWSLETTER["subject"]
        assert "<p>Markets were calm.</p>" in sent[0]["html"]

        row = store.table(Newsletter).eq("id", draft.id).maybe_single()
        assert row.status == "sent"
        assert row.sent_by == "admin-1"
        assert row.recipient_count == 2
        assert row.sent_at is not None

    def test_non_json_reply_skips_only_that_recipient(
        self, client, as_user, admin_role, profiles, resend_upstream, store
    ):
        as_user(ADMIN)
        (draft,) = store.table(Newsletter).insert([{"subject": NEWSLETTER["subject"]}])

        def resend(request):
            if json.loads(request.content)["to"] == ["a@example.com"]:
                return httpx.Response(200, text="OK")
            return httpx.Response(200, json={"id": "email-ok"})

        resend_upstream.handler = resend

        response = post_newsletter(client, {**NEWSLETTER, "newsletterId": draft.id})

        assert response.status_code == 200
        assert response.json() == {"success": True, "sentCount": 2, "totalRecipients": 3}
        assert len(resend_upstream.requests) == 3
        row = store.table(Newsletter).eq("id", draft.id).maybe_single()
        assert row.status == "sent"
        assert row.recipient_count == 2

    def test_missing_subject(self, client, as_user, admin_role, profiles):
        as_user(ADMIN)

        response = post_newsletter(client, {"htmlContent": "<p>x</p>"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing subject or content"}

    def test_no_approved_recipients(self, client, as_user, admin_role):
        as_user(ADMIN)

        response = post_newsletter(client)

        assert response.status_code == 400
        assert response.json() == {"error": "No approved recipients found"}


class TestNotifyAdminSignup:
    SIGNUP = {
        "userName": "김민수",
        "userEmail": "Minsu@Example.com",
        "userPhone": "010-1234-5678",
        "signupDate": "2026. 3. 5.",
    }

    def headers(self, token_factory, email="minsu@example.com"):
        return {"Authorization": f"Bearer {token_factory('user-7', email)}"}

    def test_missing_fields(self, client, token_factory):
        response = client.post(
            "/notify-admin-signup", json={"userName": "김민수"}, headers=self.headers(token_factory)
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Missing required fields: userName and userEmail",
        }

    def test_email_must_match_the_token(self, client, token_factory, resend_upstream):
        response = client.post(
            "/notify-admin-signup",
            json=self.SIGNUP,
            headers=self.headers(token_factory, "someone-else@example.com"),
        )

        assert response.status_code == 403
        assert response.json() == {"success": False, "error": "Email mismatch - unauthorized"}
        assert resend_upstream.requests == []

    def test_mails_the_admin(self, client, token_factory, resend_upstream):
        response = client.post(
            "/notify-admin-signup", json=self.SIGNUP, headers=self.headers(token_factory)
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"id": "email-1"}}
        (sent,) = resend_upstream.bodies()
        assert sent["to"] == ["admin@namsan.test"]
        assert sent["subject"] == "[Namsan Korea] 신규 가입 승인 요청 - 김민수"
        assert "010-1234-5678" in sent["html"]
        assert "https://portal.test/admin" in sent["html"]

    def test_mail_failure(self, client, token_factory, resend_upstream):
        resend_upstream.handler = lambda request: httpx.Response(422, json={"message": "bad from"})

        response = client.post(
            "/notify-admin-signup", json=self.SIGNUP, headers=self.headers(token_factory)
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Resend error [422]"}
