import pytest
from decimal import Decimal
from unittest.mock import Mock

from fastapi.testclient import TestClient
from pydantic import ValidationError as SchemaValidationError

from barberapi.config import ProductionSettings, Settings, get_settings
from barberapi.core.auth_middleware import resolve_role
from barberapi.core.exceptions import AuthenticationError
from barberapi.main import create_app
from barberapi.schemas.operator import OperatorRole
from barberapi.schemas.service_item import ServiceItemSchema
from barberapi.services.catalog_service import CatalogService


@pytest.fixture
def secured_settings():
    return Settings(
        _env_file=None,
        STAFF_API_TOKEN="staff-secret",
        ADMIN_API_TOKEN="admin-secret",
    )


@pytest.fixture
def app(secured_settings):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: secured_settings
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def catalog_service(app):
    mock_service = Mock(spec=CatalogService)
    mock_service.list_active.return_value = []
    mock_service.create.return_value = ServiceItemSchema(
        id=1, name="洗剪吹", price=Decimal("38.00"), sort_order=1
    )
    with app.container.services.catalog_service.override(mock_service):
        yield mock_service


class TestResolveRole:
    def test_no_tokens_configured_means_admin(self):
        settings = Settings(_env_file=None, STAFF_API_TOKEN=None, ADMIN_API_TOKEN=None)
        assert resolve_role(None, settings) == OperatorRole.ADMIN

    def test_production_without_tokens_rejects_everyone(self):
        settings = Settings(
            _env_file=None,
            ENVIRONMENT="production",
            STAFF_API_TOKEN=None,
            ADMIN_API_TOKEN=None,
        )
        with pytest.raises(AuthenticationError):
            resolve_role(None, settings)
        with pytest.raises(AuthenticationError):
            resolve_role("anything", settings)

    def test_production_settings_require_a_token(self, monkeypatch):
        monkeypatch.delenv("STAFF_API_TOKEN", raising=False)
        monkeypatch.delenv("ADMIN_API_TOKEN", raising=False)
        with pytest.raises(SchemaValidationError):
            ProductionSettings(_env_file=None)

        settings = ProductionSettings(_env_file=None, STAFF_API_TOKEN="staff-secret")
        assert resolve_role("staff-secret", settings) == OperatorRole.STAFF

    def test_tokens_map_to_roles(self, secured_settings):
        assert resolve_role("staff-secret", secured_settings) == OperatorRole.STAFF
        assert resolve_role("admin-secret", secured_settings) == OperatorRole.ADMIN

    def test_missing_or_wrong_token(self, secured_settings):
        with pytest.raises(AuthenticationError):
            resolve_role(None, secured_settings)
        with pytest.raises(AuthenticationError):
            resolve_role("guess", secured_settings)


class TestRouteAuthorization:
    """점원/관리자 권한 테스트"""

    def test_missing_token_is_401(self, client, catalog_service):
        response = client.get("/api/v1/services")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_001"

    def test_staff_can_read_catalog(self, client, catalog_service):
        response = client.get(
            "/api/v1/services", headers={"Authorization": "Bearer staff-secret"}
        )
        assert response.status_code == 200

    def test_staff_cannot_manage_catalog(self, client, catalog_service):
        response = client.post(
            "/api/v1/services",
            json={"name": "洗剪吹", "price": "38"},
            headers={"Authorization": "Bearer staff-secret"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AUTH_002"
        catalog_service.create.assert_not_called()

    def test_admin_can_manage_catalog(self, client, catalog_service):
        response = client.post(
            "/api/v1/services",
            json={"name": "洗剪吹", "price": "38"},
            headers={"Authorization": "Bearer admin-secret"},
        )

        assert response.status_code == 201
        assert response.json()["name"] == "洗剪吹"
