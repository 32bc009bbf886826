import pytest
from decimal import Decimal
from unittest.mock import patch

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import OperationalError

from barberapi.core.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from barberapi.core.payment import split_payment
from barberapi.database.session import session_scope
from barberapi.models import ConsumptionItem, ConsumptionRecord
from barberapi.repositories.member_repository import MemberRepository
from barberapi.schemas.checkout import CartLineRequest
from barberapi.services.checkout_service import CheckoutService


@pytest.fixture
def checkout_service(session_factory, settings):
    return CheckoutService(session_factory, settings)


def ledger_counts(session_factory):
    with session_scope(session_factory) as db:
        return db.query(ConsumptionRecord).count(), db.query(ConsumptionItem).count()


class TestCheckout:
    """결제 워크플로우 테스트"""

    def test_balance_checkout_deducts_total(
        self, checkout_service, make_member, make_service_item, load_member
    ):
        member_id = make_member(balance="200")
        haircut = make_service_item(name="洗剪吹", price="75")

        result = checkout_service.checkout(
            member_id, [CartLineRequest(service_id=haircut, quantity=2)], "balance"
        )

        assert result.total_amount == Decimal("150.00")
        assert result.balance_paid == Decimal("150.00")
        assert result.other_paid == Decimal("0.00")
        assert result.new_balance == Decimal("50.00")
        member = load_member(member_id)
        assert member.balance == Decimal("50.00")
        assert member.total_spent == Decimal("150.00")

    def test_mixed_checkout_with_oversized_override_uses_whole_balance(
        self, checkout_service, make_member, load_member
    ):
        member_id = make_member(balance="80")

        result = checkout_service.checkout(
            member_id,
            [CartLineRequest(name="染发", unit_price=Decimal("100"))],
            "mixed",
            balance_override="1e30",
        )

        assert result.balance_paid == Decimal("80.00")
        assert result.other_paid == Decimal("20.00")
        assert load_member(member_id).balance == Decimal("0.00")

    def test_order_total_out_of_range_writes_nothing(
        self, checkout_service, make_member, load_member, session_factory
    ):
        member_id = make_member(balance="100")

        with pytest.raises(ValidationError):
            checkout_service.checkout(
                member_id,
                [CartLineRequest(name="烫发", unit_price=Decimal("9000000000"), quantity=2)],
                "cash",
            )

        assert ledger_counts(session_factory) == (0, 0)
        assert load_member(member_id).total_spent == Decimal("0.00")

    def test_custom_line_price_out_of_range_rejected(self):
        with pytest.raises(SchemaValidationError):
            CartLineRequest(name="烫发", unit_price=Decimal("1e30"))

    def test_insufficient_balance_writes_nothing(
        self, checkout_service, make_member, load_member, session_factory
    ):
        member_id = make_member(balance="100")

        with pytest.raises(InsufficientBalanceError) as exc_info:
            checkout_service.checkout(
                member_id, [CartLineRequest(name="烫发", unit_price=Decimal("150"))], "balance"
            )

        assert "¥100.00" in exc_info.value.message
        assert ledger_counts(session_factory) == (0, 0)
        assert load_member(member_id).balance == Decimal("100.00")

    def test_mixed_checkout_splits_payment(self, checkout_service, make_member, load_member):
        member_id = make_member(balance="80")

        result = checkout_service.checkout(
            member_id,
            [CartLineRequest(name="染发", unit_price=Decimal("100"))],
            "mixed",
            balance_override="500",
        )

        assert result.balance_paid == Decimal("80.00")
        assert result.other_paid == Decimal("20.00")
        member = load_member(member_id)
        assert member.balance == Decimal("0.00")
        assert member.total_spent == Decimal("100.00")

    def test_cash_checkout_keeps_balance_but_counts_spending(
        self, checkout_service, make_member, load_member
    ):
        member_id = make_member(balance="80")

        result = checkout_service.checkout(
            member_id, [CartLineRequest(name="单剪", unit_price=Decimal("28"))], "cash"
        )

        assert result.other_paid == Decimal("28.00")
        member = load_member(member_id)
        assert member.balance == Decimal("80.00")
        assert member.total_spent == Decimal("28.00")

    def test_items_are_snapshotted(
        self, checkout_service, make_member, make_service_item, session_factory
    ):
        member_id = make_member(balance="500")
        haircut = make_service_item(name="洗剪吹", price="38")

        result = checkout_service.checkout(
            member_id,
            [
                CartLineRequest(service_id=haircut),
                CartLineRequest(service_id=haircut),
                CartLineRequest(name="护理", unit_price=Decimal("20")),
            ],
            "balance",
            operator_name="Tony",
        )

        assert [(i.service_name, i.price, i.quantity) for i in result.items] == [
            ("洗剪吹", Decimal("38.00"), 2),
            ("护理", Decimal("20.00"), 1),
        ]
        assert result.total_amount == Decimal("96.00")
        with session_scope(session_factory) as db:
            record = db.get(ConsumptionRecord, result.consumption_id)
            assert record.operator_name == "Tony"
            assert record.is_refunded is False

    def test_empty_cart_rejected(self, checkout_service, make_member):
        member_id = make_member(balance="100")
        with pytest.raises(ValidationError):
            checkout_service.checkout(member_id, [], "balance")

    def test_unknown_member(self, checkout_service):
        with pytest.raises(NotFoundError):
            checkout_service.checkout(
                999, [CartLineRequest(name="单剪", unit_price=Decimal("28"))], "cash"
            )

    def test_inactive_service_item_rejected(
        self, checkout_service, make_member, make_service_item, session_factory
    ):
        member_id = make_member(balance="100")
        retired = make_service_item(name="旧项目", price="10", is_active=False)

        with pytest.raises(NotFoundError):
            checkout_service.checkout(member_id, [CartLineRequest(service_id=retired)], "cash")
        assert ledger_counts(session_factory) == (0, 0)

    def test_concurrent_update_recomputes_split(
        self, checkout_service, make_member, bump_member_balance, load_member, session_factory
    ):
        member_id = make_member(balance="100")
        calls = {"n": 0}

        def interfering_split(total, method, balance, override=None):
            calls["n"] += 1
            if calls["n"] == 1:
                # 다른 단말에서 먼저 60을 사용
                bump_member_balance(member_id, "-60")
            return split_payment(total, method, balance, override)

        with patch(
            "barberapi.services.checkout_service.split_payment", side_effect=interfering_split
        ):
            result = checkout_service.checkout(
                member_id,
                [CartLineRequest(name="染发", unit_price=Decimal("100"))],
                "mixed",
                balance_override="100",
            )

        assert calls["n"] == 2
        assert result.balance_paid == Decimal("40.00")
        assert result.other_paid == Decimal("60.00")
        assert load_member(member_id).balance == Decimal("0.00")
        assert ledger_counts(session_factory) == (1, 1)

    def test_concurrent_update_can_make_balance_insufficient(
        self, checkout_service, make_member, bump_member_balance, load_member
    ):
        member_id = make_member(balance="100")
        calls = {"n": 0}

        def interfering_split(total, method, balance, override=None):
            calls["n"] += 1
            if calls["n"] == 1:
                bump_member_balance(member_id, "-60")
            return split_payment(total, method, balance, override)

        with patch(
            "barberapi.services.checkout_service.split_payment", side_effect=interfering_split
        ):
            with pytest.raises(InsufficientBalanceError):
                checkout_service.checkout(
                    member_id, [CartLineRequest(name="染发", unit_price=Decimal("100"))], "balance"
                )

        assert load_member(member_id).balance == Decimal("40.00")

    def test_persistent_conflict_reports_conflict(
        self, checkout_service, make_member, bump_member_balance, session_factory
    ):
        member_id = make_member(balance="100")

        def always_interfere(total, method, balance, override=None):
            bump_member_balance(member_id, "1")
            return split_payment(total, method, balance, override)

        with patch(
            "barberapi.services.checkout_service.split_payment", side_effect=always_interfere
        ):
            with pytest.raises(ConflictError):
                checkout_service.checkout(
                    member_id, [CartLineRequest(name="单剪", unit_price=Decimal("28"))], "balance"
                )

        assert ledger_counts(session_factory) == (0, 0)

    def test_failure_after_record_insert_leaves_nothing_behind(
        self, checkout_service, make_member, load_member, session_factory
    ):
        member_id = make_member(balance="200")

        with patch.object(
            MemberRepository,
            "apply_ledger_delta",
            side_effect=OperationalError("UPDATE members", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(StoreError):
                checkout_service.checkout(
                    member_id, [CartLineRequest(name="烫发", unit_price=Decimal("150"))], "balance"
                )

        assert ledger_counts(session_factory) == (0, 0)
        member = load_member(member_id)
        assert member.balance == Decimal("200.00")
        assert member.total_spent == Decimal("0.00")
