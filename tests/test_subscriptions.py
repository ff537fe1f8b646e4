"""
Tests for the subscription lifecycle actions.

These tests cover:
- Creating a subscription together with its opening payment
- Atomic rollback when either insert fails
- Transfers keeping the old row and opening a new one
- Cancellation, including repeated and illegal cancellations
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from payment.models import Payment
from subscription.models import Subscription, SubscriptionPlan, SubscriptionTransfer
from subscription.services import SubscriptionService


def _create_input(customer, vehicle_index=0, plan_id=2):
    return {
        "user_id": customer["user"].id,
        "vehicle_id": customer["vehicles"][vehicle_index].id,
        "plan_id": plan_id,
        "payment_method_id": customer["payment_method"].id,
    }


class TestCreateSubscription:
    def test_silver_plan_opens_subscription_and_payment(self, db, customer):
        """Silver gives 8 washes and a paid $30.00 subscription payment."""
        result = SubscriptionService.create_subscription(_create_input(customer), db)

        assert result.success is True
        assert result.data["remaining_washes"] == 8
        assert result.data["status"] == "active"

        subscription = db.get(Subscription, result.data["id"])
        due_in = subscription.payment_due_date - subscription.billing_period_start
        assert due_in == timedelta(days=30)

        payments = db.query(Payment).filter(Payment.subscription_id == subscription.id).all()
        assert len(payments) == 1
        payment = payments[0]
        assert payment.final_amount == Decimal("30.00")
        assert payment.base_amount == Decimal("30.00")
        assert payment.discount_amount == Decimal("0.00")
        assert payment.status == "paid"
        assert payment.item_type == "subscription"
        assert payment.payment_method_id == customer["payment_method"].id

    def test_accepts_string_ids(self, db, customer):
        inputs = {key: str(value) for key, value in _create_input(customer).items()}

        result = SubscriptionService.create_subscription(inputs, db)

        assert result.success is True

    def test_unknown_plan_is_field_error(self, db, customer):
        result = SubscriptionService.create_subscription(_create_input(customer, plan_id=99), db)

        assert result.success is False
        assert result.errors == {"plan_id": ["Invalid plan selected"]}
        assert db.query(Subscription).count() == 0

    def test_inactive_plan_is_rejected(self, db, customer):
        db.get(SubscriptionPlan, 4).is_active = False
        db.commit()

        result = SubscriptionService.create_subscription(_create_input(customer, plan_id=4), db)

        assert result.errors == {"plan_id": ["Invalid plan selected"]}

    def test_missing_fields_are_reported_per_field(self, db):
        result = SubscriptionService.create_subscription({"plan_id": 0}, db)

        assert result.success is False
        assert result.errors["plan_id"] == ["Please select a plan"]
        assert "user_id" in result.errors
        assert "vehicle_id" in result.errors
        assert "payment_method_id" in result.errors

    def test_oversized_ids_are_field_errors(self, db, customer):
        """Ids beyond the primary key range are reported, not raised."""
        inputs = {**_create_input(customer), "vehicle_id": 2**70, "payment_method_id": 2**63}

        result = SubscriptionService.create_subscription(inputs, db)

        assert result.errors == {
            "vehicle_id": ["Please select a vehicle"],
            "payment_method_id": ["Please select a payment method"],
        }
        assert db.query(Subscription).count() == 0

    def test_vehicle_of_another_customer_is_rejected(self, db, customer, make_user, make_vehicle):
        stranger = make_user()
        other_vehicle = make_vehicle(stranger, license_plate="OTHER001")
        inputs = _create_input(customer)
        inputs["vehicle_id"] = other_vehicle.id

        result = SubscriptionService.create_subscription(inputs, db)

        assert result.errors == {"vehicle_id": ["Vehicle not found for this customer"]}

    def test_second_active_subscription_on_vehicle_fails(self, db, customer):
        """A vehicle can hold only one active subscription."""
        first = SubscriptionService.create_subscription(_create_input(customer), db)
        assert first.success is True

        second = SubscriptionService.create_subscription(_create_input(customer, plan_id=3), db)

        assert second.success is False
        assert second.errors == {"form": ["Failed to create subscription. Please try again."]}
        assert db.query(Subscription).filter(
            Subscription.vehicle_id == customer["vehicles"][0].id,
            Subscription.status == "active"
        ).count() == 1

    def test_payment_failure_rolls_back_subscription(self, db, customer, monkeypatch):
        """Neither row persists when the payment insert fails."""
        original_init = Payment.__init__

        def broken_init(self, **kwargs):
            kwargs["item_type"] = "wash"  # violates the item reference check
            original_init(self, **kwargs)

        monkeypatch.setattr(Payment, "__init__", broken_init)

        result = SubscriptionService.create_subscription(_create_input(customer), db)

        assert result.success is False
        assert "form" in result.errors
        assert db.query(Subscription).count() == 0
        assert db.query(Payment).count() == 0


class TestTransferSubscription:
    @pytest.fixture
    def active(self, db, customer):
        result = SubscriptionService.create_subscription(_create_input(customer), db)
        return db.get(Subscription, result.data["id"])

    def _transfer_input(self, customer, subscription, **overrides):
        values = {
            "subscription_id": subscription.id,
            "from_vehicle_id": customer["vehicles"][0].id,
            "to_vehicle_id": customer["vehicles"][1].id,
            "transfer_reason": "Vehicle sold",
        }
        values.update(overrides)
        return values

    def test_transfer_keeps_history_and_opens_new_row(self, db, customer, active):
        active.remaining_washes = 3
        db.commit()

        result = SubscriptionService.transfer_subscription(self._transfer_input(customer, active), db)

        assert result.success is True
        db.expire_all()
        source = db.get(Subscription, active.id)
        assert source.status == "transferred"
        assert source.vehicle_id == customer["vehicles"][0].id

        new_id = result.data["subscription"]["id"]
        assert new_id != active.id
        destination = db.get(Subscription, new_id)
        assert destination.vehicle_id == customer["vehicles"][1].id
        assert destination.status == "active"
        assert destination.plan_id == source.plan_id
        assert destination.remaining_washes == 3
        assert destination.payment_due_date == source.payment_due_date
        assert destination.billing_period_start == source.billing_period_start

        transfers = db.query(SubscriptionTransfer).all()
        assert len(transfers) == 1
        transfer = transfers[0]
        assert transfer.subscription_id == active.id
        assert transfer.new_subscription_id == new_id
        assert transfer.from_vehicle_id == customer["vehicles"][0].id
        assert transfer.to_vehicle_id == customer["vehicles"][1].id
        assert transfer.transferred_by == "system"
        assert transfer.transfer_reason == "Vehicle sold"

    def test_transferred_by_is_recorded(self, db, customer, active):
        result = SubscriptionService.transfer_subscription(
            self._transfer_input(customer, active, transferred_by="csr-17"), db
        )

        assert result.data["transfer"]["transferred_by"] == "csr-17"

    def test_same_vehicle_is_rejected(self, db, customer, active):
        result = SubscriptionService.transfer_subscription(
            self._transfer_input(customer, active, to_vehicle_id=customer["vehicles"][0].id), db
        )

        assert result.success is False
        assert list(result.errors) == ["to_vehicle_id"]

    def test_unknown_subscription_is_field_error(self, db, customer, active):
        result = SubscriptionService.transfer_subscription(
            self._transfer_input(customer, active, subscription_id=9999), db
        )

        assert result.errors == {"subscription_id": ["Subscription not found"]}

    def test_wrong_source_vehicle_is_field_error(self, db, customer, active, make_vehicle):
        third = make_vehicle(customer["user"], license_plate="THIRD003")

        result = SubscriptionService.transfer_subscription(
            self._transfer_input(customer, active, from_vehicle_id=third.id), db
        )

        assert list(result.errors) == ["from_vehicle_id"]

    def test_cancelled_subscription_cannot_be_transferred(self, db, customer, active):
        SubscriptionService.cancel_subscription(active.id, db)

        result = SubscriptionService.transfer_subscription(self._transfer_input(customer, active), db)

        assert result.success is False
        assert result.errors == {"subscription_id": ["Cannot transfer a subscription that is inactive"]}
        assert db.query(SubscriptionTransfer).count() == 0

    def test_destination_conflict_rolls_back_everything(self, db, customer, active):
        """An active subscription on the destination aborts the whole transfer."""
        SubscriptionService.create_subscription(_create_input(customer, vehicle_index=1, plan_id=1), db)

        result = SubscriptionService.transfer_subscription(self._transfer_input(customer, active), db)

        assert result.success is False
        assert result.errors == {"form": ["Failed to transfer subscription. Please try again."]}
        db.expire_all()
        assert db.get(Subscription, active.id).status == "active"
        assert db.query(SubscriptionTransfer).count() == 0
        assert db.query(Subscription).count() == 2


class TestCancelSubscription:
    def test_cancel_sets_inactive_and_keeps_washes(self, db, customer, make_subscription):
        subscription = make_subscription(customer["user"], customer["vehicles"][0], remaining_washes=6)

        result = SubscriptionService.cancel_subscription(subscription.id, db)

        assert result.success is True
        db.expire_all()
        cancelled = db.get(Subscription, subscription.id)
        assert cancelled.status == "inactive"
        assert cancelled.remaining_washes == 6
        assert cancelled.cancellation_date is not None

    def test_cancel_twice_is_a_no_op(self, db, customer, make_subscription):
        subscription = make_subscription(customer["user"], customer["vehicles"][0])
        SubscriptionService.cancel_subscription(subscription.id, db)
        first_date = db.get(Subscription, subscription.id).cancellation_date

        result = SubscriptionService.cancel_subscription(subscription.id, db)

        assert result.success is True
        assert result.data["status"] == "inactive"
        assert db.get(Subscription, subscription.id).cancellation_date == first_date

    def test_cancel_overdue_subscription(self, db, customer, make_subscription):
        subscription = make_subscription(customer["user"], customer["vehicles"][0], status="overdue")

        result = SubscriptionService.cancel_subscription(subscription.id, db)

        assert result.data["status"] == "inactive"

    def test_cancel_missing_subscription_is_not_found(self, db):
        result = SubscriptionService.cancel_subscription(12345, db)

        assert result.success is False
        assert result.errors == {"subscription_id": ["Subscription not found"]}

    def test_cancel_oversized_id(self, db):
        result = SubscriptionService.cancel_subscription(2**70, db)

        assert result.errors == {"subscription_id": ["Invalid subscription id"]}

    def test_cancel_transferred_subscription_is_rejected(self, db, customer, make_subscription):
        subscription = make_subscription(customer["user"], customer["vehicles"][0], status="transferred")

        result = SubscriptionService.cancel_subscription(subscription.id, db)

        assert result.errors == {"subscription_id": ["Cannot cancel a subscription that is transferred"]}
        db.expire_all()
        assert db.get(Subscription, subscription.id).status == "transferred"
