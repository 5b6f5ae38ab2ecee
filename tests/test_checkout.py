# tests/test_checkout.py
import pytest

from kasir.database.repositories import OutOfStock, SalesRepo
from kasir.modules.pricing import DiscountPolicy
from kasir.modules.sales import (
    Cart,
    CheckoutError,
    CheckoutService,
    InsufficientPayment,
    compose_notes,
    sales_name_from_notes,
)


def _cart(products, qty=2, discount=10):
    cart = Cart()
    kopi = products["kopi"]
    cart.add_product(kopi)
    cart.update_quantity(kopi.product_id, qty)
    cart.update_discount(kopi.product_id, discount)
    return cart


def _count(conn, table):
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def test_cash_sale_is_persisted_with_engine_totals(conn, products, sale_date, stock_of):
    result = CheckoutService(conn).finalize(
        _cart(products),
        payment_method="cash",
        payment_received=200000,
        customer_name="Budi",
        cashier_name="Sari",
        date=sale_date,
    )
    h = result.header
    assert h.sale_number == "INV20250115-0001"
    assert h.total_amount == pytest.approx(199800)
    assert h.subtotal == 222000
    assert h.tax_amount == pytest.approx(19800)
    assert h.payment_received == 200000
    assert h.change_amount == pytest.approx(200)
    assert h.invoice_status == "lunas"
    assert h.customer_name == "Budi"
    assert h.notes == "Sales: Sari"
    assert h.created_at == sale_date

    items = SalesRepo(conn).list_items(h.sale_id)
    assert len(items) == 1
    assert items[0].quantity == 2
    assert items[0].discount == 10
    assert items[0].subtotal == pytest.approx(199800)
    assert items[0].subtotal == result.totals.grand_total

    kopi_id = products["kopi"].product_id
    assert stock_of(kopi_id) == 8
    mv = conn.execute(
        "SELECT transaction_type, quantity, reference_number FROM stock_movements WHERE product_id=?",
        (kopi_id,),
    ).fetchall()
    assert [tuple(r) for r in mv] == [("outbound", 2, "INV20250115-0001")]


def test_sale_numbers_are_sequential_per_day(conn, products, sale_date):
    svc = CheckoutService(conn)
    first = svc.finalize(_cart(products, qty=1), payment_method="card", date=sale_date)
    second = svc.finalize(_cart(products, qty=1), payment_method="card", date=sale_date)
    other_day = svc.finalize(_cart(products, qty=1), payment_method="card", date="2025-01-16")
    assert first.header.sale_number == "INV20250115-0001"
    assert second.header.sale_number == "INV20250115-0002"
    assert other_day.header.sale_number == "INV20250116-0001"


def test_short_cash_payment_writes_nothing(conn, products, sale_date, stock_of):
    with pytest.raises(InsufficientPayment) as exc:
        CheckoutService(conn).finalize(
            _cart(products), payment_method="cash", payment_received=150000, date=sale_date
        )
    assert "Rp\u00a0199.800" in str(exc.value)
    assert "Rp\u00a0150.000" in str(exc.value)
    assert _count(conn, "sales") == 0
    assert _count(conn, "sale_items") == 0
    assert stock_of(products["kopi"].product_id) == 10


def test_exact_cash_payment_is_accepted(conn, products, sale_date):
    cart = _cart(products)
    total = cart.totals()[1].grand_total
    result = CheckoutService(conn).finalize(cart, payment_received=round(total), date=sale_date)
    assert result.header.change_amount >= 0


@pytest.mark.parametrize("method", ["card", "transfer"])
def test_non_cash_payment_is_the_total(conn, products, sale_date, method):
    result = CheckoutService(conn).finalize(
        _cart(products), payment_method=method, payment_received=0, date=sale_date
    )
    h = result.header
    assert h.payment_received == h.total_amount
    assert h.change_amount == 0
    assert h.invoice_status == "lunas"


def test_credit_sale_is_unpaid(conn, products, sale_date):
    result = CheckoutService(conn).finalize(
        _cart(products), payment_method="credit", bank_details="BCA 123", date=sale_date
    )
    assert result.header.invoice_status == "belum_bayar"
    assert result.header.notes == "Bank Details: BCA 123"


def test_empty_cart_is_rejected(conn):
    with pytest.raises(CheckoutError):
        CheckoutService(conn).finalize(Cart(), payment_method="card")


def test_unknown_payment_method_is_rejected(conn, products):
    with pytest.raises(CheckoutError):
        CheckoutService(conn).finalize(_cart(products), payment_method="bitcoin")
    assert _count(conn, "sales") == 0


def test_special_customer_policy_overrides_line_discounts(conn, products, sale_date):
    cart = _cart(products, qty=1, discount=50)
    result = CheckoutService(conn).finalize(
        cart, payment_method="card", policy=DiscountPolicy(global_percent=20), date=sale_date
    )
    assert result.items[0].discount == 20
    assert result.header.total_amount == pytest.approx(111000 * 0.8)


def test_stock_gone_at_checkout_rolls_back(conn, products, sale_date, stock_of):
    cart = Cart()
    cart.add_product(products["gula"])
    cart.add_product(products["kopi"])
    conn.execute("UPDATE products SET stock_quantity=0 WHERE product_id=?", (products["gula"].product_id,))
    conn.commit()

    with pytest.raises(OutOfStock):
        CheckoutService(conn).finalize(cart, payment_method="card", date=sale_date)

    assert _count(conn, "sales") == 0
    assert _count(conn, "stock_movements") == 0
    assert stock_of(products["kopi"].product_id) == 10


def test_notes_round_trip_cashier_name():
    notes = compose_notes("Sari", "BCA 123")
    assert notes == "Sales: Sari | Bank Details: BCA 123"
    assert sales_name_from_notes(notes) == "Sari"
    assert compose_notes(None, None) is None
    assert sales_name_from_notes(None) == "Unknown"
    assert sales_name_from_notes("Bank Details: x") == "Unknown"
