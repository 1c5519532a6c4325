"""
Module: donation_kernel.selectors.base
Responsibility: Abstract base class for read-only aggregate queries.

Invariants enforced:
    - Read-only access: selectors MUST NOT add, delete, flush or commit.
    - Session ownership: the caller owns the session and its transaction.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    def __init__(self, session: Session):
        self.session = session
