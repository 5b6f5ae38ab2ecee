# kasir/constants.py
from __future__ import annotations

from dataclasses import dataclass

DATA_DIR = "data"
DB_FILE_NAME = "kasir.db"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

INVOICE_TEMPLATE_PATH = "templates/invoices/sale_invoice.html"


@dataclass(frozen=True)
class TaxRate:
    """
    A VAT rate expressed in whole percent.

    Prices in the catalog already include the effective rate, so the pre-tax
    base is recovered with ``100 / (100 + percent)``.
    """
    percent: int

    @property
    def rate(self) -> float:
        return self.percent / 100

    @property
    def inclusive_divisor(self) -> int:
        return 100 + self.percent


# Effective PPN baked into every catalog price. Change here only.
PPN = TaxRate(11)

# Nominal label used on tax documents since the 12% transition; applied to
# DPP Nilai Lain it yields the same tax as PPN on DPP Faktur.
PPN_NOMINAL = TaxRate(12)

# Rupiah has no minor unit in circulation.
CURRENCY_SYMBOL = "Rp"
CURRENCY_SYMBOL_SEPARATOR = "\u00a0"  # no-break space, as the id-ID locale renders it
CURRENCY_PLACES = 0
CURRENCY_THOUSANDS_SEP = "."
CURRENCY_DECIMAL_SEP = ","

# Stored vs recomputed totals closer than this are the same sale total.
RECONCILE_EPSILON = 0.5

PAYMENT_METHODS = ("cash", "card", "transfer", "credit")

INVOICE_STATUS_PAID = "lunas"
INVOICE_STATUS_UNPAID = "belum_bayar"

SALE_NUMBER_PREFIX = "INV"
