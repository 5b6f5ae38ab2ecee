from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex

from ...database.repositories.sales_repo import SaleHeader
from ...utils.helpers import fmt_currency, fmt_percent
from ...utils.validators import try_parse_float, try_parse_int
from ..pricing import InvalidInput, InvoiceTotals, LineInput, aggregate, clamp_percent
from .editor import EditLine


class SalesTableModel(QAbstractTableModel):
    HEADERS = ["Sale Number", "Date", "Customer", "Payment", "Total", "Status"]

    def __init__(self, rows: list[SaleHeader]):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            mapping = [
                r.sale_number,
                (r.created_at or "")[:10],
                r.customer_name or "Walk-in",
                r.payment_method,
                fmt_currency(r.total_amount),
                r.invoice_status,
            ]
            return mapping[index.column()]
        if role == Qt.TextAlignmentRole and index.column() == 4:
            return Qt.AlignRight | Qt.AlignVCenter
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section] if section < len(self.HEADERS) else None
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> SaleHeader:
        return self._rows[row]

    def replace(self, rows: list[SaleHeader]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()


class SaleItemsModel(QAbstractTableModel):
    """
    Sale lines for the report editor.

    Rows are dicts shaped like SalesRepo.list_items_with_names(). Qty and
    Discount are editable; Line Total is re-priced through the engine after
    every accepted edit, never patched in place.
    """
    HEADERS = ["#", "Product", "Qty", "Unit Price", "Discount", "Line Total"]
    COL_QTY = 2
    COL_DISCOUNT = 4
    COL_TOTAL = 5

    def __init__(self, rows: list):
        super().__init__()
        self._rows = [dict(r) for r in rows]
        self._reprice()

    def _reprice(self):
        self._results, self._totals = aggregate(self.line_inputs())

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def flags(self, idx):
        base = super().flags(idx)
        if idx.isValid() and idx.column() in (self.COL_QTY, self.COL_DISCOUNT):
            return base | Qt.ItemIsEditable
        return base

    def data(self, idx, role=Qt.DisplayRole):
        if not idx.isValid():
            return None
        r = self._rows[idx.row()]
        c = idx.column()
        if role == Qt.EditRole and c == self.COL_QTY:
            return int(r["quantity"])
        if role == Qt.EditRole and c == self.COL_DISCOUNT:
            return float(r["discount"] or 0.0)
        if role in (Qt.DisplayRole, Qt.EditRole):
            m = [
                idx.row() + 1,
                r.get("product_name") or "",
                str(int(r["quantity"])),
                fmt_currency(r["unit_price"]),
                fmt_percent(r["discount"] or 0.0),
                fmt_currency(self._results[idx.row()].line_total),
            ]
            return m[c]
        if role == Qt.TextAlignmentRole and c >= self.COL_QTY:
            return Qt.AlignRight | Qt.AlignVCenter
        return None

    def setData(self, idx, value, role=Qt.EditRole):
        if not idx.isValid() or role != Qt.EditRole:
            return False
        r = self._rows[idx.row()]
        if idx.column() == self.COL_QTY:
            ok, qty = try_parse_int(value)
            if not ok or qty is None or qty < 1:
                return False
            r["quantity"] = qty
        elif idx.column() == self.COL_DISCOUNT:
            try:
                r["discount"] = clamp_percent(value)
            except InvalidInput:
                return False
        else:
            return False
        self._reprice()
        self.dataChanged.emit(idx, idx, [role])
        total_idx = self.index(idx.row(), self.COL_TOTAL)
        self.dataChanged.emit(total_idx, total_idx, [Qt.DisplayRole])
        return True

    def headerData(self, s, o, role=Qt.DisplayRole):
        return self.HEADERS[s] if o == Qt.Horizontal and role == Qt.DisplayRole else super().headerData(s, o, role)

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = [dict(r) for r in rows]
        self._reprice()
        self.endResetModel()

    def remove_row(self, row: int):
        if 0 <= row < len(self._rows):
            self.beginRemoveRows(QModelIndex(), row, row)
            del self._rows[row]
            self._reprice()
            self.endRemoveRows()

    def rows(self) -> list[dict]:
        return [dict(r) for r in self._rows]

    def line_inputs(self) -> list[LineInput]:
        out = []
        for r in self._rows:
            ok, price = try_parse_float(r["unit_price"])
            out.append(LineInput(price if ok else r["unit_price"], r["quantity"], float(r["discount"] or 0.0)))
        return out

    def edit_lines(self) -> list[EditLine]:
        """Current rows as SaleEditor.update_items() input."""
        return [
            EditLine(int(r["product_id"]), float(r["unit_price"]), int(r["quantity"]), float(r["discount"] or 0.0))
            for r in self._rows
        ]

    def totals(self) -> InvoiceTotals:
        return self._totals
