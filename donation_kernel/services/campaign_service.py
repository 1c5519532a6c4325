"""
CampaignService -- campaign creation and moderation.

Campaigns are created PENDING with a zero running total.  Only admins move
them between statuses; the running total is owned by the LedgerReconciler
and never set here.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.domain.commands import CreateCampaign, parse_enum
from donation_kernel.exceptions import CampaignNotFoundError, UserNotFoundError
from donation_kernel.logging_config import get_logger
from donation_kernel.models import Campaign, CampaignStatus
from donation_kernel.services.base import BaseService

logger = get_logger("services.campaign")


class CampaignService(BaseService):
    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def create_campaign(self, command: CreateCampaign, user_id: UUID) -> Campaign:
        if self.repository.get_user(user_id) is None:
            raise UserNotFoundError(str(user_id))

        campaign = self.repository.create_campaign(
            Campaign(
                user_id=user_id,
                title=command.title,
                description=command.description,
                goal_amount=command.goal_amount,
                category=command.category,
                image_urls=list(command.image_urls) or None,
                status=CampaignStatus.PENDING.value,
            )
        )
        logger.info(
            "campaign_created",
            extra={"campaign_id": str(campaign.id), "user_id": str(user_id)},
        )
        return campaign

    def set_campaign_status(
        self,
        campaign_id: UUID,
        status: CampaignStatus | str,
        admin_id: UUID,
    ) -> Campaign:
        """Moderate a campaign.  Any status may be set from any status."""
        target = parse_enum(CampaignStatus, status, "status")
        campaign = self.repository.update_campaign(
            campaign_id,
            {"status": target.value, "updated_at": self._clock.now()},
        )
        if campaign is None:
            raise CampaignNotFoundError(str(campaign_id))

        logger.info(
            "campaign_status_changed",
            extra={
                "campaign_id": str(campaign_id),
                "status": target.value,
                "admin_id": str(admin_id),
            },
        )
        return campaign
