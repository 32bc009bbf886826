"""
장바구니 - 카탈로그 항목과 직접 입력 항목을 같은 라인 형태로 정규화한다.

카탈로그 항목은 추가 시점의 이름/가격을 복사해 두므로 이후 가격이
바뀌어도 이미 담긴 라인에는 영향이 없다.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from barberapi.utils.money_utils import ZERO, to_money


@dataclass
class CartLine:
    key: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    service_id: Optional[int] = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def is_custom(self) -> bool:
        return self.service_id is None


class Cart:
    """Ordered cart; quantities never drop below 1, a line at 0 is removed."""

    def __init__(self) -> None:
        self._lines: Dict[str, CartLine] = {}
        self._custom_seq = 0

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(list(self._lines.values()))

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines.values()), ZERO)

    def get(self, key: str) -> Optional[CartLine]:
        return self._lines.get(key)

    def add_catalog_item(self, service: Any, quantity: int = 1) -> CartLine:
        """카탈로그 항목 추가 - 이미 있으면 수량만 증가"""
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        key = f"service:{service.id}"
        line = self._lines.get(key)
        if line:
            line.quantity += quantity
            return line
        line = CartLine(
            key=key,
            name=service.name,
            unit_price=to_money(service.price),
            quantity=quantity,
            service_id=service.id,
        )
        self._lines[key] = line
        return line

    def add_custom_item(self, name: str, unit_price: Any, quantity: int = 1) -> CartLine:
        """직접 입력 항목 추가 - 항상 새 라인"""
        name = (name or "").strip()
        if not name:
            raise ValueError("custom item name is required")
        price = to_money(unit_price)
        if price <= ZERO:
            raise ValueError("custom item price must be positive")
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        self._custom_seq += 1
        key = f"custom:{self._custom_seq}"
        line = CartLine(key=key, name=name, unit_price=price, quantity=quantity)
        self._lines[key] = line
        return line

    def change_quantity(self, key: str, delta: int) -> Optional[CartLine]:
        """
        수량 변경

        Returns:
            변경된 라인, 수량이 1 미만이 되어 제거된 경우 None
        """
        line = self._lines.get(key)
        if line is None:
            return None
        new_qty = line.quantity + delta
        if new_qty <= 0:
            del self._lines[key]
            return None
        line.quantity = new_qty
        return line

    def remove(self, key: str) -> None:
        self._lines.pop(key, None)

    def clear(self) -> None:
        self._lines.clear()
