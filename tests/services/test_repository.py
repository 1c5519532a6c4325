"""
Tests for Repository.

Covers:
- Creates return the persisted entity with id and timestamps
- Updates are partial merges; missing rows return None
- Filtered listings
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from donation_kernel.exceptions import ValidationError
from donation_kernel.models import (
    BoutiqueOrder,
    CampaignStatus,
    DonationStatus,
    FinancialDonation,
    OrderStatus,
    User,
    UserRole,
)


class TestUsers:
    def test_create_lowercases_email(self, repository):
        user = repository.create_user(
            User(
                email="  Mixed.Case@Example.ORG ",
                first_name="Fatou",
                last_name="Diop",
                password_hash="x",
                role=UserRole.BENEFICIARY.value,
            )
        )

        assert user.id is not None
        assert user.created_at is not None
        assert user.email == "mixed.case@example.org"
        assert user.is_verified is False
        assert repository.get_user_by_email("MIXED.case@example.org").id == user.id

    def test_partial_update(self, repository, beneficiary):
        updated = repository.update_user(beneficiary.id, {"first_name": "Renamed"})

        assert updated.first_name == "Renamed"
        assert updated.last_name == beneficiary.last_name

    def test_update_missing_returns_none(self, repository):
        assert repository.update_user(uuid4(), {"first_name": "Ghost"}) is None

    def test_update_rejects_unknown_field(self, repository, beneficiary):
        with pytest.raises(ValidationError) as exc_info:
            repository.update_user(beneficiary.id, {"nickname": "x"})
        assert exc_info.value.field == "nickname"

    def test_update_rejects_id(self, repository, beneficiary):
        with pytest.raises(ValidationError):
            repository.update_user(beneficiary.id, {"id": uuid4()})


class TestCampaigns:
    def test_filter_by_status_newest_first(self, repository, create_campaign):
        older = create_campaign(title="Older")
        newer = create_campaign(title="Newer")
        create_campaign(status=CampaignStatus.PENDING, title="Pending")

        approved = repository.get_campaigns(status="approved")

        assert [c.id for c in approved] == [newer.id, older.id]

    def test_limit(self, repository, create_campaign):
        for i in range(3):
            create_campaign(title=f"Campaign {i}")

        assert len(repository.get_campaigns(limit=2)) == 2

    def test_user_campaigns(self, repository, approved_campaign, beneficiary, admin_user):
        assert [c.id for c in repository.get_user_campaigns(beneficiary.id)] == [approved_campaign.id]
        assert repository.get_user_campaigns(admin_user.id) == []


class TestDonations:
    def test_lookup_by_transaction_id(self, repository, approved_campaign):
        donation = repository.create_donation(
            FinancialDonation(
                campaign_id=approved_campaign.id,
                amount=Decimal("42.00"),
                payment_operator="wave",
                operator_transaction_id="LOOKUP-1",
                status=DonationStatus.PENDING.value,
            )
        )

        assert repository.get_donation_by_operator_tx_id("LOOKUP-1").id == donation.id
        assert repository.get_donation_by_operator_tx_id("LOOKUP-1", for_update=True).id == donation.id
        assert repository.get_donation_by_operator_tx_id("MISSING") is None
        assert [d.id for d in repository.get_campaign_donations(approved_campaign.id)] == [donation.id]
        assert repository.get_campaign_donations(approved_campaign.id, status="completed") == []


class TestBoutique:
    def test_items_filtered_by_category(self, repository, create_item):
        toy = create_item(title="Kite", category="toys")
        create_item(title="Scarf", category="clothing")

        assert [i.id for i in repository.get_boutique_items(status="available", category="toys")] == [toy.id]
        assert len(repository.get_boutique_items()) == 2

    def test_orders_filtered(self, session, repository, available_item, beneficiary, admin_user):
        order = repository.create_boutique_order(
            BoutiqueOrder(
                user_id=beneficiary.id,
                item_id=available_item.id,
                status=OrderStatus.PENDING_APPROVAL.value,
            )
        )

        assert [o.id for o in repository.get_boutique_orders(status="pending_approval")] == [order.id]
        assert [o.id for o in repository.get_user_orders(beneficiary.id)] == [order.id]
        assert repository.get_boutique_orders(user_id=admin_user.id) == []
        assert [o.id for o in repository.get_boutique_orders(item_id=available_item.id)] == [order.id]
