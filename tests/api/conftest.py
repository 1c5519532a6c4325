"""HTTP-level fixtures: a TestClient bound to the per-test database."""

import pytest
from fastapi.testclient import TestClient

from donation_api import create_app
from donation_services import IdentityGateway, TokenPurpose


@pytest.fixture
def app(platform_config, session_factory):
    return create_app(platform_config, session_factory)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(session, auth_config):
    """Factory: bearer headers for a seeded user."""

    def _headers(user) -> dict[str, str]:
        token = IdentityGateway(session, auth_config).issue_token(user, TokenPurpose.ACCESS)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_headers(auth_headers, admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def beneficiary_headers(auth_headers, beneficiary):
    return auth_headers(beneficiary)
