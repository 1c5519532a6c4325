"""
Request and response bodies of the HTTP surface.

Request models only check shape; field constraints (positive amounts,
required text) are enforced when the bodies are turned into kernel
commands, so the API and direct callers share one set of rules.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class _ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


class UserOut(_ORMModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    is_verified: bool
    created_at: datetime | None = None


class LoginResponse(BaseModel):
    token: str
    user: UserOut


class RegisterResponse(BaseModel):
    message: str
    user: UserOut


class MessageResponse(BaseModel):
    message: str


class ProfileUpdateRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = None


class VerificationUpdateRequest(BaseModel):
    is_verified: bool


# ---------------------------------------------------------------------------
# Campaigns and donations
# ---------------------------------------------------------------------------


class CampaignCreateRequest(BaseModel):
    title: str
    description: str
    goal_amount: Decimal
    category: str | None = None
    image_urls: list[str] = Field(default_factory=list)


class CampaignStatusRequest(BaseModel):
    status: str


class CampaignOut(_ORMModel):
    id: UUID
    user_id: UUID
    title: str
    description: str
    goal_amount: Decimal
    current_amount: Decimal
    status: str
    category: str | None = None
    image_urls: list[str] | None = None
    created_at: datetime | None = None


class ReconciliationOut(BaseModel):
    campaign_id: UUID
    recorded_amount: Decimal
    expected_amount: Decimal
    drift: Decimal
    corrected: bool


class DonationInitiateRequest(BaseModel):
    campaign_id: UUID
    amount: Decimal
    payment_operator: str
    donor_name: str | None = None
    operator_transaction_id: str | None = None


class DonationOut(_ORMModel):
    id: UUID
    campaign_id: UUID
    user_id: UUID | None = None
    donor_name: str | None = None
    amount: Decimal
    payment_operator: str
    operator_transaction_id: str | None = None
    status: str
    created_at: datetime | None = None


class DonationInitiateResponse(BaseModel):
    donation: DonationOut
    message: str


class PaymentCallbackRequest(BaseModel):
    transaction_id: str
    status: str
    amount: Decimal


class PaymentCallbackResponse(BaseModel):
    result: Literal["applied", "duplicate"]
    donation_id: UUID
    donation_status: str


# ---------------------------------------------------------------------------
# Material donations and boutique
# ---------------------------------------------------------------------------


class MaterialDonationRequest(BaseModel):
    donor_name: str
    donor_contact: str
    title: str
    description: str
    pickup_location: str
    category: str | None = None
    image_urls: list[str] = Field(default_factory=list)


class MaterialDonationOut(_ORMModel):
    id: UUID
    donor_name: str
    donor_contact: str
    title: str
    description: str
    pickup_location: str
    category: str | None = None
    image_urls: list[str] | None = None
    status: str
    created_at: datetime | None = None


class PublishRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None


class BoutiqueItemOut(_ORMModel):
    id: UUID
    source_donation_id: UUID | None = None
    title: str
    description: str
    category: str
    image_urls: list[str] | None = None
    status: str
    published_at: datetime | None = None
    published_by_admin_id: UUID


class OrderRequest(BaseModel):
    item_id: UUID
    motivation_message: str | None = None


class OrderOut(_ORMModel):
    id: UUID
    user_id: UUID
    item_id: UUID
    motivation_message: str | None = None
    status: str
    handled_by_admin_id: UUID | None = None
    handled_at: datetime | None = None
    created_at: datetime | None = None


class OrderDecisionRequest(BaseModel):
    status: str


class DecisionOut(BaseModel):
    order_id: UUID
    item_id: UUID
    order_status: str
    item_status: str
    auto_rejected_order_ids: list[UUID] = Field(default_factory=list)
