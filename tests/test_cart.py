import pytest
from decimal import Decimal
from types import SimpleNamespace

from barberapi.core.cart import Cart


@pytest.fixture
def haircut():
    return SimpleNamespace(id=1, name="洗剪吹", price=Decimal("38"))


@pytest.fixture
def dye():
    return SimpleNamespace(id=2, name="染发", price=Decimal("168"))


class TestCart:
    """장바구니 편집 테스트"""

    def test_adding_same_catalog_item_increments_quantity(self, haircut):
        cart = Cart()
        cart.add_catalog_item(haircut)
        line = cart.add_catalog_item(haircut)

        assert len(cart) == 1
        assert line.quantity == 2
        assert cart.total == Decimal("76.00")

    def test_decrement_below_one_removes_line(self, haircut):
        cart = Cart()
        line = cart.add_catalog_item(haircut)

        assert cart.change_quantity(line.key, -1) is None
        assert cart.is_empty

    def test_re_adding_after_removal_starts_at_one(self, haircut):
        cart = Cart()
        line = cart.add_catalog_item(haircut)
        cart.change_quantity(line.key, -5)

        line = cart.add_catalog_item(haircut)
        assert line.quantity == 1

    def test_change_quantity_unknown_key_is_noop(self, haircut):
        cart = Cart()
        cart.add_catalog_item(haircut)
        assert cart.change_quantity("service:999", 1) is None
        assert len(cart) == 1

    def test_custom_items_always_get_their_own_line(self):
        cart = Cart()
        first = cart.add_custom_item("修眉", "10")
        second = cart.add_custom_item("修眉", "10")

        assert first.key != second.key
        assert first.is_custom
        assert cart.total == Decimal("20.00")

    @pytest.mark.parametrize(
        "name, price, quantity",
        [("", "10", 1), ("  ", "10", 1), ("修眉", "0", 1), ("修眉", "-5", 1), ("修眉", "10", 0)],
    )
    def test_invalid_custom_item_rejected(self, name, price, quantity):
        with pytest.raises(ValueError):
            Cart().add_custom_item(name, price, quantity=quantity)

    def test_catalog_price_is_snapshotted(self, haircut):
        cart = Cart()
        line = cart.add_catalog_item(haircut)
        haircut.price = Decimal("48")

        assert line.unit_price == Decimal("38.00")

    def test_total_mixes_catalog_and_custom_lines(self, haircut, dye):
        cart = Cart()
        cart.add_catalog_item(haircut, quantity=2)
        cart.add_catalog_item(dye)
        cart.add_custom_item("护理", "25.5")

        assert [line.name for line in cart] == ["洗剪吹", "染发", "护理"]
        assert cart.total == Decimal("269.50")

    def test_remove_and_clear(self, haircut, dye):
        cart = Cart()
        line = cart.add_catalog_item(haircut)
        cart.add_catalog_item(dye)

        cart.remove(line.key)
        assert cart.get(line.key) is None
        cart.clear()
        assert cart.is_empty
