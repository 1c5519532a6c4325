"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Common constructor and session-handling contract for every service in
    the kernel layer.  Services receive a SQLAlchemy ``Session`` and persist
    with ``session.flush()`` -- never ``session.commit()``.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or roll back themselves.  The caller (``session_scope``,
    the API request scope, or a test) owns commit/rollback.  When a service
    raises, the caller MUST roll back: a conflict detected mid-operation may
    follow writes made earlier in the same operation.
"""

from abc import ABC

from sqlalchemy.orm import Session

from donation_kernel.repository import Repository


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide aggregate reads -- those belong in
          ``donation_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
        self.repository = Repository(session)
