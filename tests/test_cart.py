# tests/test_cart.py
import pytest

from kasir.database.repositories import OutOfStock
from kasir.modules.pricing import DiscountPolicy, InvalidInput, compute
from kasir.modules.sales import Cart


def test_add_same_product_increments_quantity(products):
    cart = Cart()
    cart.add_product(products["kopi"])
    cart.add_product(products["kopi"])
    assert len(cart) == 1
    assert cart.items[0].quantity == 2


def test_add_beyond_stock_raises(products):
    cart = Cart()
    cart.add_product(products["gula"])  # stock 1
    with pytest.raises(OutOfStock) as exc:
        cart.add_product(products["gula"])
    assert exc.value.requested == 2
    assert exc.value.available == 1
    assert cart.items[0].quantity == 1


def test_update_quantity(products):
    cart = Cart()
    kopi = products["kopi"]
    cart.add_product(kopi)
    cart.update_quantity(kopi.product_id, 5)
    assert cart.items[0].quantity == 5
    with pytest.raises(OutOfStock):
        cart.update_quantity(kopi.product_id, 11)
    assert cart.items[0].quantity == 5
    cart.update_quantity(kopi.product_id, 0)
    assert cart.is_empty


@pytest.mark.parametrize("raw", [2.5, "abc", None, True])
def test_update_quantity_refuses_non_whole_numbers(products, raw):
    cart = Cart()
    kopi = products["kopi"]
    cart.add_product(kopi)
    with pytest.raises(InvalidInput) as exc:
        cart.update_quantity(kopi.product_id, raw)
    assert exc.value.field == "quantity"
    assert cart.items[0].quantity == 1


def test_update_quantity_accepts_integral_values(products):
    cart = Cart()
    kopi = products["kopi"]
    cart.add_product(kopi)
    cart.update_quantity(kopi.product_id, 3.0)
    assert cart.items[0].quantity == 3
    assert isinstance(cart.items[0].quantity, int)
    cart.update_quantity(kopi.product_id, "4")
    assert cart.items[0].quantity == 4


def test_update_discount_is_clamped(products):
    cart = Cart()
    kopi = products["kopi"]
    cart.add_product(kopi)
    cart.update_discount(kopi.product_id, 150)
    assert cart.items[0].custom_discount == 100
    cart.update_discount(kopi.product_id, -3)
    assert cart.items[0].custom_discount == 0
    with pytest.raises(InvalidInput):
        cart.update_discount(kopi.product_id, "lots")


def test_totals_come_from_the_engine(products):
    cart = Cart()
    kopi = products["kopi"]
    cart.add_product(kopi)
    cart.update_quantity(kopi.product_id, 2)
    cart.update_discount(kopi.product_id, 10)

    results, totals = cart.totals()
    assert results == [compute(111000.0, 2, 10)]
    assert totals.grand_total == pytest.approx(199800)
    assert cart.subtotal == 222000


def test_policy_overrides_cart_discounts(products):
    cart = Cart()
    cart.add_product(products["kopi"])
    cart.add_product(products["teh"])
    cart.update_discount(products["teh"].product_id, 50)

    inputs = cart.line_inputs(DiscountPolicy(global_percent=20))
    assert [ln.discount_percent for ln in inputs] == [20, 20]


def test_remove_and_clear(products):
    cart = Cart()
    cart.add_product(products["kopi"])
    cart.add_product(products["teh"])
    cart.remove(products["kopi"].product_id)
    assert [it.product.name for it in cart] == ["Teh Melati"]
    cart.clear()
    assert cart.is_empty
    assert cart.totals()[1].grand_total == 0.0
