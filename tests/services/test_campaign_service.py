"""Tests for CampaignService: creation and admin moderation."""

from decimal import Decimal
from uuid import uuid4

import pytest

from donation_kernel.domain.commands import CreateCampaign
from donation_kernel.exceptions import CampaignNotFoundError, UserNotFoundError, ValidationError
from donation_kernel.models import CampaignStatus
from donation_kernel.services import CampaignService


@pytest.fixture
def campaigns(session, clock) -> CampaignService:
    return CampaignService(session, clock=clock)


def _command(**overrides) -> CreateCampaign:
    fields = {
        "title": "Clean water",
        "description": "A well for the health centre",
        "goal_amount": Decimal("5000"),
        "category": "health",
        "image_urls": ("https://img.example.org/well.jpg",),
    }
    fields.update(overrides)
    return CreateCampaign(**fields)


class TestCreateCampaign:
    def test_created_pending_with_zero_total(self, campaigns, beneficiary):
        campaign = campaigns.create_campaign(_command(), beneficiary.id)

        assert campaign.status == CampaignStatus.PENDING
        assert campaign.current_amount == Decimal("0")
        assert campaign.goal_amount == Decimal("5000.00")
        assert campaign.user_id == beneficiary.id
        assert campaign.image_urls == ["https://img.example.org/well.jpg"]
        assert campaign.is_accepting_donations is False

    def test_goal_must_be_positive(self):
        with pytest.raises(ValidationError) as exc_info:
            _command(goal_amount=Decimal("-1"))
        assert exc_info.value.field == "goal_amount"

    def test_title_required(self):
        with pytest.raises(ValidationError):
            _command(title="   ")

    def test_unknown_owner(self, campaigns):
        with pytest.raises(UserNotFoundError):
            campaigns.create_campaign(_command(), uuid4())


class TestSetCampaignStatus:
    def test_approve(self, session, campaigns, pending_campaign, admin_user):
        campaign = campaigns.set_campaign_status(pending_campaign.id, "approved", admin_user.id)
        session.commit()

        assert campaign.status == "approved"
        assert campaign.is_accepting_donations is True

    def test_accepts_enum(self, campaigns, approved_campaign, admin_user):
        campaign = campaigns.set_campaign_status(
            approved_campaign.id, CampaignStatus.REJECTED, admin_user.id
        )

        assert campaign.status == "rejected"

    def test_unknown_status(self, campaigns, pending_campaign, admin_user):
        with pytest.raises(ValidationError) as exc_info:
            campaigns.set_campaign_status(pending_campaign.id, "archived", admin_user.id)
        assert exc_info.value.field == "status"

    def test_unknown_campaign(self, campaigns, admin_user):
        with pytest.raises(CampaignNotFoundError):
            campaigns.set_campaign_status(uuid4(), "approved", admin_user.id)
