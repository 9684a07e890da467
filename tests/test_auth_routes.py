from marketplace.auth import password_reset_routes
from marketplace.models import UserStatus

from conftest import PASSWORD


def _login(client, email, password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


class TestLogin:
    def test_returns_tokens(self, client, factory):
        user = factory.customer()
        resp = _login(client, user["email"])
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["accessToken"] and data["refreshToken"]
        assert data["needsPasswordChange"] is False

    def test_access_token_authenticates(self, client, factory):
        user = factory.customer()
        token = _login(client, user["email"]).get_json()["data"]["accessToken"]
        resp = client.get("/api/user/me", headers={"Authorization": token})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["email"] == user["email"]

    def test_wrong_password(self, client, factory):
        user = factory.customer()
        resp = _login(client, user["email"], "nope-nope")
        assert resp.status_code == 401
        assert resp.get_json()["ok"] is False

    def test_unknown_user(self, client):
        assert _login(client, "ghost@example.com").status_code == 404

    def test_blocked_user(self, client, factory):
        user = factory.customer(status=UserStatus.BLOCKED)
        assert _login(client, user["email"]).status_code == 403

    def test_missing_fields(self, client):
        assert client.post("/api/auth/login", json={}).status_code == 400


class TestGuards:
    def test_no_token(self, client):
        assert client.get("/api/user/me").status_code == 401

    def test_garbage_token(self, client):
        resp = client.get("/api/user/me", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client, factory):
        user = factory.customer()
        resp = client.get("/api/user/me", headers={"Authorization": user["refresh_token"]})
        assert resp.status_code == 401

    def test_wrong_role(self, client, factory):
        customer = factory.customer()
        resp = client.get("/api/user/", headers=customer["headers"])
        assert resp.status_code == 403

    def test_blocked_user_token_rejected(self, client, factory):
        user = factory.customer(status=UserStatus.BLOCKED)
        assert client.get("/api/user/me", headers=user["headers"]).status_code == 401


class TestRefreshToken:
    def test_issues_new_access_token(self, client, factory):
        user = factory.vendor()
        resp = client.post("/api/auth/refresh-token", json={"refreshToken": user["refresh_token"]})
        assert resp.status_code == 200
        token = resp.get_json()["data"]["accessToken"]
        assert client.get("/api/user/me", headers={"Authorization": token}).status_code == 200

    def test_access_token_is_not_a_refresh_token(self, client, factory):
        user = factory.vendor()
        resp = client.post("/api/auth/refresh-token", json={"refreshToken": user["token"]})
        assert resp.status_code == 401


class TestChangePassword:
    def test_changes_password(self, client, factory):
        user = factory.customer()
        resp = client.post(
            "/api/auth/change-password",
            json={"oldPassword": PASSWORD, "newPassword": "brand-new-pw"},
            headers=user["headers"],
        )
        assert resp.status_code == 200
        assert _login(client, user["email"], "brand-new-pw").status_code == 200
        assert _login(client, user["email"]).status_code == 401

    def test_wrong_old_password(self, client, factory):
        user = factory.customer()
        resp = client.post(
            "/api/auth/change-password",
            json={"oldPassword": "wrong", "newPassword": "brand-new-pw"},
            headers=user["headers"],
        )
        assert resp.status_code == 401

    def test_short_new_password(self, client, factory):
        user = factory.customer()
        resp = client.post(
            "/api/auth/change-password",
            json={"oldPassword": PASSWORD, "newPassword": "abc"},
            headers=user["headers"],
        )
        assert resp.status_code == 400


class TestPasswordReset:
    def test_forgot_then_reset(self, client, factory, monkeypatch):
        sent = []
        monkeypatch.setattr(
            password_reset_routes, "send_email",
            lambda subject, recipients, body, sender=None: sent.append((recipients, body)),
        )
        user = factory.customer()

        resp = client.post("/api/auth/forgot-password", json={"email": user["email"]})
        assert resp.status_code == 200
        assert len(sent) == 1
        recipients, body = sent[0]
        assert recipients == [user["email"]]

        link = next(line for line in body.splitlines() if "token=" in line)
        token = link.split("token=", 1)[1].strip()

        resp = client.post(
            "/api/auth/reset-password",
            json={"email": user["email"], "token": token, "newPassword": "reset-pw-1"},
        )
        assert resp.status_code == 200
        assert _login(client, user["email"], "reset-pw-1").status_code == 200

    def test_forgot_unknown_email(self, client):
        assert client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"}).status_code == 404

    def test_reset_with_invalid_token(self, client, factory):
        user = factory.customer()
        resp = client.post(
            "/api/auth/reset-password",
            json={"email": user["email"], "token": "forged", "newPassword": "reset-pw-1"},
        )
        assert resp.status_code == 403

    def test_reset_token_bound_to_email(self, client, factory, monkeypatch):
        sent = []
        monkeypatch.setattr(
            password_reset_routes, "send_email",
            lambda subject, recipients, body, sender=None: sent.append(body),
        )
        alice = factory.customer()
        bob = factory.customer()
        client.post("/api/auth/forgot-password", json={"email": alice["email"]})
        link = next(line for line in sent[0].splitlines() if "token=" in line)
        token = link.split("token=", 1)[1].strip()

        resp = client.post(
            "/api/auth/reset-password",
            json={"email": bob["email"], "token": token, "newPassword": "reset-pw-1"},
        )
        assert resp.status_code == 403


def test_login_rejects_non_string_credentials(client, factory):
    user = factory.customer()
    assert client.post("/api/auth/login", json={"email": 7, "password": PASSWORD}).status_code == 400
    assert client.post("/api/auth/login", json={"email": user["email"], "password": 123456}).status_code == 400
