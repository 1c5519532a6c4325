"""Material donations, boutique items and order decisions over HTTP."""

from donation_kernel.models import BoutiqueItem


def _request(client, item_id, headers):
    return client.post(
        "/api/boutique/orders",
        json={"item_id": str(item_id), "motivation_message": "For school"},
        headers=headers,
    )


class TestMaterialDonationFlow:
    def test_submit_publish_and_list(self, client, admin_headers):
        submitted = client.post(
            "/api/material-donations",
            json={
                "donor_name": "Khady",
                "donor_contact": "+221 76 111 22 33",
                "title": "Sewing machine",
                "description": "Manual, works",
                "pickup_location": "Saint-Louis",
                "category": "tools",
            },
        )
        assert submitted.status_code == 201
        donation_id = submitted.json()["id"]
        assert submitted.json()["status"] == "pending_verification"

        pending = client.get("/api/admin/material-donations/pending", headers=admin_headers)
        assert donation_id in [d["id"] for d in pending.json()]

        published = client.post(
            f"/api/admin/material-donations/{donation_id}/publish",
            json={},
            headers=admin_headers,
        )
        assert published.status_code == 200
        item = published.json()
        assert item["status"] == "available"
        assert item["source_donation_id"] == donation_id

        again = client.post(
            f"/api/admin/material-donations/{donation_id}/publish",
            json={},
            headers=admin_headers,
        )
        assert again.status_code == 409
        assert again.json()["code"] == "ALREADY_PUBLISHED"

        listed = client.get("/api/boutique/items", params={"category": "tools"})
        assert [i["id"] for i in listed.json()] == [item["id"]]

    def test_reject(self, client, admin_headers, material_donation):
        response = client.post(
            f"/api/admin/material-donations/{material_donation.id}/reject",
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    def test_publish_rejected_reports_decided(self, client, admin_headers, material_donation):
        client.post(
            f"/api/admin/material-donations/{material_donation.id}/reject",
            headers=admin_headers,
        )

        response = client.post(
            f"/api/admin/material-donations/{material_donation.id}/publish",
            json={"category": "tools"},
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.json()["code"] == "MATERIAL_DONATION_ALREADY_DECIDED"


class TestOrderFlow:
    def test_scenario_c(self, client, session, available_item, create_user, auth_headers, admin_headers):
        first = _request(client, available_item.id, auth_headers(create_user()))
        second = _request(client, available_item.id, auth_headers(create_user()))
        assert first.status_code == 201
        assert second.status_code == 201

        pending = client.get("/api/admin/boutique/orders/pending", headers=admin_headers)
        assert len(pending.json()) == 2

        approved = client.put(
            f"/api/admin/boutique/orders/{first.json()['id']}/status",
            json={"status": "approved"},
            headers=admin_headers,
        )
        assert approved.status_code == 200
        assert approved.json()["item_status"] == "allocated"
        assert approved.json()["auto_rejected_order_ids"] == [second.json()["id"]]

        conflict = client.put(
            f"/api/admin/boutique/orders/{second.json()['id']}/status",
            json={"status": "approved"},
            headers=admin_headers,
        )
        assert conflict.status_code == 409

        session.expire_all()
        assert session.get(BoutiqueItem, available_item.id).status == "allocated"
        item = client.get(f"/api/boutique/items/{available_item.id}")
        assert item.json()["status"] == "allocated"

    def test_request_unavailable_item(self, client, available_item, admin_headers, beneficiary_headers):
        client.post(f"/api/admin/boutique/items/{available_item.id}/withdraw", headers=admin_headers)

        response = _request(client, available_item.id, beneficiary_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "ITEM_UNAVAILABLE"

    def test_request_requires_auth(self, client, available_item):
        response = client.post("/api/boutique/orders", json={"item_id": str(available_item.id)})

        assert response.status_code == 401

    def test_my_orders(self, client, available_item, beneficiary_headers):
        order_id = _request(client, available_item.id, beneficiary_headers).json()["id"]

        response = client.get("/api/users/me/orders", headers=beneficiary_headers)

        assert [o["id"] for o in response.json()] == [order_id]

    def test_unknown_decision(self, client, available_item, beneficiary_headers, admin_headers):
        order_id = _request(client, available_item.id, beneficiary_headers).json()["id"]

        response = client.put(
            f"/api/admin/boutique/orders/{order_id}/status",
            json={"status": "maybe"},
            headers=admin_headers,
        )

        assert response.status_code == 400


class TestAdminUsers:
    def test_list_and_verify(self, client, admin_headers, create_user):
        user = create_user(is_verified=False)

        listed = client.get("/api/admin/users", headers=admin_headers)
        assert str(user.id) in [u["id"] for u in listed.json()]

        response = client.put(
            f"/api/admin/users/{user.id}/verification",
            json={"is_verified": True},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_verified"] is True

    def test_requires_admin(self, client, beneficiary_headers):
        assert client.get("/api/admin/users", headers=beneficiary_headers).status_code == 403

    def test_requires_token(self, client):
        assert client.get("/api/admin/users").status_code == 401
