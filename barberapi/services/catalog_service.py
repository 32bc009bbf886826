import logging
from decimal import Decimal
from typing import Callable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barberapi.config import Settings
from barberapi.core.exceptions import (
    BaseAPIException,
    NotFoundError,
    StoreError,
    ValidationError,
)
from barberapi.database.session import session_scope
from barberapi.repositories.service_item_repository import ServiceItemRepository
from barberapi.schemas.service_item import (
    ServiceItemCreate,
    ServiceItemSchema,
    ServiceItemUpdate,
)
from barberapi.utils.money_utils import ZERO, to_money

logger = logging.getLogger(__name__)


def parse_price(value) -> Decimal:
    """서비스 가격 검증 - 숫자가 아니거나 범위를 벗어나면 ValidationError"""
    try:
        price = to_money(value)
    except ValueError:
        raise ValidationError(f"Invalid price: {value!r}")
    if price <= ZERO:
        raise ValidationError("Price must be greater than zero", details={"price": str(price)})
    return price


class CatalogService:
    """서비스 항목(카탈로그) 관리"""

    def __init__(self, session_factory: Callable[[], Session], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings

    def list_active(self) -> List[ServiceItemSchema]:
        try:
            with session_scope(self.session_factory) as db:
                return ServiceItemRepository(db).list_active()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list service items: {str(e)}")
            raise StoreError(f"Failed to list service items: {str(e)}")

    def create(self, request: ServiceItemCreate) -> ServiceItemSchema:
        """서비스 항목 추가 - 목록의 맨 뒤에 배치"""
        try:
            with session_scope(self.session_factory) as db:
                repo = ServiceItemRepository(db)
                item = repo.create(
                    name=request.name,
                    price=parse_price(request.price),
                    sort_order=repo.next_sort_order(),
                    is_active=True,
                )
                result = ServiceItemSchema.model_validate(item)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create service item: {str(e)}")
            raise StoreError(f"Failed to create service item: {str(e)}")

        logger.info(f"Created service item {result.name} ({result.price})")
        return result

    def update(self, item_id: int, request: ServiceItemUpdate) -> ServiceItemSchema:
        """이름/가격 수정 - 이미 기록된 소비 항목은 스냅샷이므로 영향 없음"""
        fields = {}
        if request.name is not None:
            fields["name"] = request.name
        if request.price is not None:
            fields["price"] = parse_price(request.price)

        try:
            with session_scope(self.session_factory) as db:
                item = ServiceItemRepository(db).update(item_id, **fields)
                if item is None:
                    raise NotFoundError(f"Service item not found: {item_id}")
                return ServiceItemSchema.model_validate(item)
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to update service item {item_id}: {str(e)}")
            raise StoreError(f"Failed to update service item: {str(e)}")

    def soft_delete(self, item_id: int) -> ServiceItemSchema:
        """비활성화 (목록과 결제에서 제외)"""
        try:
            with session_scope(self.session_factory) as db:
                item = ServiceItemRepository(db).update(item_id, is_active=False)
                if item is None:
                    raise NotFoundError(f"Service item not found: {item_id}")
                result = ServiceItemSchema.model_validate(item)
        except BaseAPIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to deactivate service item {item_id}: {str(e)}")
            raise StoreError(f"Failed to deactivate service item: {str(e)}")

        logger.info(f"Deactivated service item {item_id}")
        return result
