"""
FastAPI dependencies: one transaction per request, bearer authentication,
and kernel services wired with the configured policies.
"""

from __future__ import annotations

from typing import Iterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from donation_config.bridges import build_allocation_policy, build_ledger_policy
from donation_config.schema import PlatformConfig
from donation_kernel.db.engine import session_scope
from donation_kernel.exceptions import InvalidOrExpiredTokenError
from donation_kernel.models import User
from donation_kernel.services import AllocationWorkflow, CampaignService, LedgerReconciler
from donation_services import AccountService, IdentityGateway, Principal

_bearer = HTTPBearer(auto_error=False)


def get_config(request: Request) -> PlatformConfig:
    return request.app.state.config


def get_db_session(request: Request) -> Iterator[Session]:
    """Commit when the endpoint returns, roll back when it raises."""
    with session_scope(request.app.state.session_factory) as session:
        yield session


def get_identity_gateway(
    session: Session = Depends(get_db_session),
    config: PlatformConfig = Depends(get_config),
) -> IdentityGateway:
    return IdentityGateway(session, config.auth)


def get_account_service(
    session: Session = Depends(get_db_session),
    config: PlatformConfig = Depends(get_config),
) -> AccountService:
    return AccountService(session, config.auth)


def get_ledger(
    session: Session = Depends(get_db_session),
    config: PlatformConfig = Depends(get_config),
) -> LedgerReconciler:
    return LedgerReconciler(session, policy=build_ledger_policy(config))


def get_allocation(
    session: Session = Depends(get_db_session),
    config: PlatformConfig = Depends(get_config),
) -> AllocationWorkflow:
    return AllocationWorkflow(session, policy=build_allocation_policy(config))


def get_campaign_service(session: Session = Depends(get_db_session)) -> CampaignService:
    return CampaignService(session)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> User | None:
    if credentials is None:
        return None
    return gateway.resolve_user(credentials.credentials)


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise InvalidOrExpiredTokenError("missing bearer token")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    Principal(subject_id=user.id, role=getattr(user.role, "value", user.role)).require_admin()
    return user
