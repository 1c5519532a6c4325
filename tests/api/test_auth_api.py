"""Auth, profile and cross-cutting HTTP behaviour."""

from donation_kernel.models import User

PASSWORD = "correct-horse-battery"


def _register(client, email="awa@example.org", password="s3cret-enough"):
    return client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": password,
            "first_name": "Awa",
            "last_name": "Ndiaye",
        },
    )


class TestRegisterAndLogin:
    def test_register_creates_unverified_beneficiary(self, client):
        response = _register(client, email="Awa@Example.org")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User created successfully"
        assert body["user"]["email"] == "awa@example.org"
        assert body["user"]["role"] == "beneficiary"
        assert body["user"]["is_verified"] is False
        assert "password_hash" not in body["user"]

    def test_register_duplicate_email(self, client):
        _register(client)

        response = _register(client)

        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"

    def test_register_short_password(self, client):
        response = _register(client, password="short")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_login_and_me(self, client, beneficiary):
        login = client.post(
            "/api/auth/login",
            json={"email": "beneficiary@example.org", "password": PASSWORD},
        )
        assert login.status_code == 200
        token = login.json()["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert me.status_code == 200
        assert me.json()["user"]["id"] == str(beneficiary.id)

    def test_login_wrong_password(self, client, beneficiary):
        response = client.post(
            "/api/auth/login",
            json={"email": "beneficiary@example.org", "password": "not-it"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_OR_EXPIRED_TOKEN"

    def test_me_with_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401


class TestEmailAndPasswordTokens:
    def test_verify_email(self, client, session):
        user_id = _register(client).json()["user"]["id"]
        session.expire_all()
        user = session.query(User).filter_by(email="awa@example.org").one()
        token = user.email_verification_token

        response = client.get("/api/auth/verify-email", params={"token": token})
        assert response.status_code == 200

        session.expire_all()
        user = session.get(User, user.id)
        assert str(user.id) == user_id
        assert user.is_verified is True
        assert user.email_verification_token is None

        # Single use
        again = client.get("/api/auth/verify-email", params={"token": token})
        assert again.status_code == 401

    def test_forgot_and_reset_password(self, client, session, beneficiary):
        response = client.post(
            "/api/auth/forgot-password", json={"email": "beneficiary@example.org"}
        )
        assert response.status_code == 200

        session.expire_all()
        token = session.get(User, beneficiary.id).password_reset_token
        reset = client.post(
            "/api/auth/reset-password", json={"token": token, "password": "brand-new-pass"}
        )
        assert reset.status_code == 200

        old = client.post(
            "/api/auth/login",
            json={"email": "beneficiary@example.org", "password": PASSWORD},
        )
        new = client.post(
            "/api/auth/login",
            json={"email": "beneficiary@example.org", "password": "brand-new-pass"},
        )
        assert old.status_code == 401
        assert new.status_code == 200

    def test_forgot_password_unknown_email(self, client):
        response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.org"})

        assert response.status_code == 404


class TestProfile:
    def test_update_profile(self, client, beneficiary_headers):
        response = client.put(
            "/api/users/me", json={"first_name": "Fatou"}, headers=beneficiary_headers
        )

        assert response.status_code == 200
        assert response.json()["user"]["first_name"] == "Fatou"

    def test_my_campaigns(self, client, beneficiary_headers, approved_campaign):
        response = client.get("/api/users/me/campaigns", headers=beneficiary_headers)

        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [str(approved_campaign.id)]


class TestPlumbing:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client):
        response = client.get("/health")

        assert response.headers["X-Request-ID"]

    def test_error_body_carries_request_id(self, client):
        response = client.get("/api/auth/me", headers={"X-Request-ID": "req-err"})

        assert response.json()["request_id"] == "req-err"

    def test_request_validation_error(self, client):
        response = client.post("/api/auth/login", json={"email": "x@example.org"})

        assert response.status_code == 422
        assert response.json()["code"] == "http.validation_error"

    def test_unhandled_error_is_500(self, app):
        from fastapi.testclient import TestClient

        @app.get("/boom")
        def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        assert response.json()["code"] == "internal.unhandled"
        assert "kaboom" not in response.text
