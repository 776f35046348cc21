"""
Transfer workflow tests.

Verifies:
- Creating a transfer records it as pending with no stock effect
- Completing moves stock exactly once
- Cancelling has no stock effect
- Only pending transfers may change status (409 otherwise)
- Every change is audited
"""

from datetime import datetime

import pytest

from armory.models import AuditLog, Transfer
from armory.services import transfer_service
from armory.services.transfer_service import TransferNotFoundError, TransferStateError
from armory.validation import ValidationError
from conftest import principal_for, reload


@pytest.fixture
def stocked(bases, asset, make_stock):
    source = make_stock(bases[0], asset, opening=50, closing=50)
    destination = make_stock(bases[1], asset, opening=10, closing=10)
    return source, destination


def _payload(bases, asset, quantity=20, **overrides):
    payload = {
        "assetId": asset.id,
        "fromBaseId": bases[0].id,
        "toBaseId": bases[1].id,
        "quantity": quantity,
        "transferDate": "2024-06-01T09:30:00Z",
    }
    payload.update(overrides)
    return payload


class TestCreateTransfer:

    def test_created_pending_without_stock_effect(self, client, bases, asset, stocked, logistics_user, logistics_headers):
        resp = client.post("/api/transfers", json=_payload(bases, asset), headers=logistics_headers)

        assert resp.status_code == 201
        body = resp.json
        assert body["status"] == "pending"
        assert body["initiatedBy"] == logistics_user.id
        assert body["transferDate"] == "2024-06-01T09:30:00.000Z"

        source, destination = stocked
        assert reload(source).closing_balance == 50
        assert reload(destination).closing_balance == 10

    def test_create_is_audited(self, client, db_session, bases, asset, stocked, logistics_user, logistics_headers):
        resp = client.post("/api/transfers", json=_payload(bases, asset), headers=logistics_headers)

        entry = db_session.query(AuditLog).filter_by(action_type="transfer").one()
        assert entry.user_id == logistics_user.id
        assert entry.resource_id == resp.json["id"]
        assert entry.new_data["quantity"] == 20

    @pytest.mark.parametrize(
        "overrides,fragment",
        [
            ({"quantity": 0}, "quantity"),
            ({"quantity": -3}, "quantity"),
            ({"quantity": 1.5}, "quantity"),
            ({"transferDate": "not-a-date"}, "transferDate"),
            ({"fromBaseId": None}, "fromBaseId"),
            ({"colour": "green"}, "colour"),
        ],
    )
    def test_invalid_payload_rejected(self, client, db_session, bases, asset, stocked, admin_headers, overrides, fragment):
        resp = client.post("/api/transfers", json=_payload(bases, asset, **overrides), headers=admin_headers)

        assert resp.status_code == 400
        assert resp.json["error"] == "Failed to create transfer"
        assert fragment in resp.json["message"]
        assert db_session.query(Transfer).count() == 0

    def test_same_base_rejected(self, client, bases, asset, admin_headers):
        resp = client.post(
            "/api/transfers",
            json=_payload(bases, asset, toBaseId=bases[0].id),
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_unknown_asset_rejected(self, client, bases, asset, admin_headers):
        resp = client.post("/api/transfers", json=_payload(bases, asset, assetId=asset.id + 999), headers=admin_headers)
        assert resp.status_code == 400
        assert "assetId" in resp.json["message"]


class TestTransferStatus:

    def _create(self, client, bases, asset, headers, quantity=20):
        resp = client.post("/api/transfers", json=_payload(bases, asset, quantity=quantity), headers=headers)
        assert resp.status_code == 201
        return resp.json["id"]

    def test_complete_moves_stock(self, client, bases, asset, stocked, admin_headers):
        transfer_id = self._create(client, bases, asset, admin_headers)

        resp = client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "completed"}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["status"] == "completed"
        source, destination = stocked
        assert reload(source).closing_balance == 30
        assert reload(destination).closing_balance == 30

    def test_complete_clamps_source(self, client, bases, asset, stocked, admin_headers):
        transfer_id = self._create(client, bases, asset, admin_headers, quantity=80)

        client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "completed"}, headers=admin_headers)

        source, destination = stocked
        assert reload(source).closing_balance == 0
        assert reload(destination).closing_balance == 90

    def test_second_completion_conflicts_without_double_apply(self, client, bases, asset, stocked, admin_headers):
        transfer_id = self._create(client, bases, asset, admin_headers)
        client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "completed"}, headers=admin_headers)

        resp = client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "completed"}, headers=admin_headers)

        assert resp.status_code == 409
        source, destination = stocked
        assert reload(source).closing_balance == 30
        assert reload(destination).closing_balance == 30

    def test_cancel_has_no_stock_effect(self, client, bases, asset, stocked, admin_headers):
        transfer_id = self._create(client, bases, asset, admin_headers)

        resp = client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "cancelled"}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["status"] == "cancelled"
        source, destination = stocked
        assert reload(source).closing_balance == 50
        assert reload(destination).closing_balance == 10

    def test_cancelled_cannot_be_completed(self, client, bases, asset, stocked, admin_headers):
        transfer_id = self._create(client, bases, asset, admin_headers)
        client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "cancelled"}, headers=admin_headers)

        resp = client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "completed"}, headers=admin_headers)

        assert resp.status_code == 409
        assert reload(stocked[0]).closing_balance == 50

    def test_unknown_status_rejected(self, client, bases, asset, stocked, admin_headers):
        transfer_id = self._create(client, bases, asset, admin_headers)
        resp = client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "shipped"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_missing_transfer_is_404(self, client, seed, admin_headers):
        resp = client.patch("/api/transfers/999999/status", json={"status": "completed"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_status_change_audits_old_and_new(self, client, db_session, bases, asset, stocked, admin_headers):
        transfer_id = self._create(client, bases, asset, admin_headers)
        client.patch(f"/api/transfers/{transfer_id}/status", json={"status": "completed"}, headers=admin_headers)

        entries = (
            db_session.query(AuditLog)
            .filter_by(action_type="transfer", resource_id=transfer_id)
            .order_by(AuditLog.id.asc())
            .all()
        )
        assert len(entries) == 2
        assert entries[1].old_data == {"status": "pending"}
        assert entries[1].new_data == {"status": "completed"}

    def test_commander_cannot_complete_foreign_transfer(self, client, bases, asset, make_stock, admin_headers, commander_headers):
        make_stock(bases[1], asset, closing=10)
        make_stock(bases[2], asset, closing=10)
        resp = client.post(
            "/api/transfers",
            json=_payload(bases, asset, fromBaseId=bases[1].id, toBaseId=bases[2].id, quantity=5),
            headers=admin_headers,
        )

        resp = client.patch(f"/api/transfers/{resp.json['id']}/status", json={"status": "completed"}, headers=commander_headers)

        assert resp.status_code == 403


class TestTransferService:

    def test_pending_to_pending_is_a_state_error(self, db_session, bases, asset, stocked, admin_user):
        principal = principal_for(admin_user)
        transfer = transfer_service.create_transfer(principal, _payload(bases, asset))

        with pytest.raises(TransferStateError):
            transfer_service.update_transfer_status(principal, transfer.id, "pending")

    def test_not_found(self, db_session, admin_user):
        with pytest.raises(TransferNotFoundError):
            transfer_service.update_transfer_status(principal_for(admin_user), 424242, "completed")

    def test_none_status_is_validation_error(self, db_session, admin_user):
        with pytest.raises(ValidationError):
            transfer_service.update_transfer_status(principal_for(admin_user), 1, None)

    def test_listing_filters_by_asset_type_and_date(self, db_session, bases, asset, other_asset, stocked, admin_user):
        principal = principal_for(admin_user)
        transfer_service.create_transfer(principal, _payload(bases, asset, transferDate="2024-06-01"))
        transfer_service.create_transfer(principal, _payload(bases, other_asset, transferDate="2024-06-02"))
        transfer_service.create_transfer(principal, _payload(bases, asset, transferDate="2024-07-01"))

        weapons = transfer_service.list_transfers(principal, asset_type="weapons")
        june = transfer_service.list_transfers(
            principal,
            start=datetime(2024, 6, 1),
            end=datetime(2024, 6, 30, 23, 59, 59),
        )

        assert len(weapons) == 2
        assert [t.asset_id for t in june] == [other_asset.id, asset.id]
