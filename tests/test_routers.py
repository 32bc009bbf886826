import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import Mock

from fastapi.testclient import TestClient

from barberapi.core.exceptions import InsufficientBalanceError, NotFoundError
from barberapi.main import create_app
from barberapi.schemas.checkout import CheckoutResponse
from barberapi.schemas.member import Member
from barberapi.schemas.orders import RefundResponse
from barberapi.schemas.pagination import DirectPaginatedResponse
from barberapi.schemas.recharge import RechargeResponse
from barberapi.schemas.stats import DashboardStats
from barberapi.services.checkout_service import CheckoutService
from barberapi.services.member_service import MemberService
from barberapi.services.order_service import OrderService
from barberapi.services.recharge_service import RechargeService
from barberapi.services.stats_service import StatsService


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    """테스트 클라이언트 픽스처 (토큰 미설정 = 관리자)"""
    return TestClient(app)


@pytest.fixture
def sample_member():
    return Member(
        id=1,
        member_no="M202610190001",
        name="张三",
        phone="13800000000",
        balance=Decimal("350.00"),
        total_recharged=Decimal("300.00"),
        total_spent=Decimal("0.00"),
        created_at=datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc),
    )


class TestHealthRoute:
    def test_health_checks_database(self, app, client, session_factory):
        with app.container.database.session_factory.override(session_factory):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "ok"


class TestMemberRoutes:
    """회원 라우터 테스트"""

    def test_register_member(self, app, client, sample_member):
        mock_service = Mock(spec=MemberService)
        mock_service.register.return_value = sample_member

        with app.container.services.member_service.override(mock_service):
            response = client.post(
                "/api/v1/members", json={"name": "张三", "phone": "13800000000"}
            )

        assert response.status_code == 201
        assert response.json()["member_no"] == "M202610190001"
        request = mock_service.register.call_args.args[0]
        assert request.name == "张三"

    def test_register_requires_phone(self, client):
        response = client.post("/api/v1/members", json={"name": "张三"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"

    def test_search_members(self, app, client, sample_member):
        mock_service = Mock(spec=MemberService)
        mock_service.search.return_value = DirectPaginatedResponse[Member](
            data=[sample_member], total_count=1, has_next=False, limit=15, offset=0
        )

        with app.container.services.member_service.override(mock_service):
            response = client.get("/api/v1/members", params={"q": "138"})

        assert response.status_code == 200
        assert response.json()["total_count"] == 1
        mock_service.search.assert_called_once_with(keyword="138", limit=15, offset=0)

    def test_unknown_member_uses_error_envelope(self, app, client):
        mock_service = Mock(spec=MemberService)
        mock_service.get.side_effect = NotFoundError("Member not found: 9")

        with app.container.services.member_service.override(mock_service):
            response = client.get("/api/v1/members/9")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND_001"
        assert body["error"]["message"] == "Member not found: 9"


class TestLedgerRoutes:
    """충전/결제/주문 라우터 테스트"""

    def test_recharge_passes_operator_name(self, app, client):
        mock_service = Mock(spec=RechargeService)
        mock_service.recharge.return_value = RechargeResponse(
            record_id=7,
            member_id=1,
            amount=Decimal("300.00"),
            bonus=Decimal("50.00"),
            total_credited=Decimal("350.00"),
            new_balance=Decimal("350.00"),
            total_recharged=Decimal("300.00"),
            operator_name="Tony",
        )

        with app.container.services.recharge_service.override(mock_service):
            response = client.post(
                "/api/v1/recharge",
                json={"member_id": 1, "amount": "300", "payment_method": "wechat"},
                headers={"X-Operator-Name": "Tony"},
            )

        assert response.status_code == 200
        assert Decimal(response.json()["bonus"]) == Decimal("50")
        kwargs = mock_service.recharge.call_args.kwargs
        assert kwargs["operator_name"] == "Tony"
        assert kwargs["amount"] == Decimal("300")

    def test_checkout_insufficient_balance(self, app, client):
        mock_service = Mock(spec=CheckoutService)
        mock_service.checkout.side_effect = InsufficientBalanceError(
            "Insufficient balance. Current balance: ¥100.00",
            details={"current_balance": "100.00", "required": "150.00"},
        )

        with app.container.services.checkout_service.override(mock_service):
            response = client.post(
                "/api/v1/checkout",
                json={
                    "member_id": 1,
                    "items": [{"name": "烫发", "unit_price": "150"}],
                    "payment_method": "balance",
                },
            )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "BALANCE_001"
        assert error["details"]["current_balance"] == "100.00"

    def test_checkout_line_needs_service_or_custom_fields(self, client):
        response = client.post(
            "/api/v1/checkout", json={"member_id": 1, "items": [{"quantity": 1}]}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"

    def test_checkout_success(self, app, client):
        mock_service = Mock(spec=CheckoutService)
        mock_service.checkout.return_value = CheckoutResponse(
            consumption_id=3,
            member_id=1,
            total_amount=Decimal("100.00"),
            balance_paid=Decimal("80.00"),
            other_paid=Decimal("20.00"),
            payment_method="mixed",
            new_balance=Decimal("0.00"),
            total_spent=Decimal("100.00"),
            operator_name="店员",
        )

        with app.container.services.checkout_service.override(mock_service):
            response = client.post(
                "/api/v1/checkout",
                json={
                    "member_id": 1,
                    "items": [{"service_id": 2, "quantity": 1}],
                    "payment_method": "mixed",
                    "balance_override": "500",
                },
            )

        assert response.status_code == 200
        kwargs = mock_service.checkout.call_args.kwargs
        assert Decimal(str(kwargs["balance_override"])) == Decimal("500")
        assert kwargs["lines"][0].service_id == 2

    def test_refund_without_body(self, app, client):
        mock_service = Mock(spec=OrderService)
        mock_service.mark_refunded.return_value = RefundResponse(
            consumption_id=3, is_refunded=True
        )

        with app.container.services.order_service.override(mock_service):
            response = client.post("/api/v1/orders/consumptions/3/refund")

        assert response.status_code == 200
        assert response.json()["is_refunded"] is True
        assert mock_service.mark_refunded.call_args.kwargs["note"] is None

    def test_list_consumptions_parses_dates(self, app, client):
        mock_service = Mock(spec=OrderService)
        mock_service.list_consumptions.return_value = DirectPaginatedResponse(
            data=[], total_count=0, has_next=False, limit=100, offset=0
        )

        with app.container.services.order_service.override(mock_service):
            response = client.get(
                "/api/v1/orders/consumptions",
                params={"date_from": "2026-10-01", "date_to": "2026-10-19"},
            )

        assert response.status_code == 200
        kwargs = mock_service.list_consumptions.call_args.kwargs
        assert kwargs["date_from"] == date(2026, 10, 1)
        assert kwargs["date_to"] == date(2026, 10, 19)

    def test_dashboard(self, app, client):
        mock_service = Mock(spec=StatsService)
        mock_service.dashboard.return_value = DashboardStats(
            as_of=date(2026, 10, 19),
            today_recharge=Decimal("300.00"),
            today_consumption=Decimal("28.00"),
            month_recharge=Decimal("900.00"),
            month_consumption=Decimal("500.00"),
            new_members_today=1,
            new_members_month=4,
            total_members=40,
        )

        with app.container.services.stats_service.override(mock_service):
            response = client.get("/api/v1/stats/dashboard")

        assert response.status_code == 200
        assert response.json()["total_members"] == 40
