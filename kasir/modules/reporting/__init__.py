from .sales_reports import (
    DriftRow,
    PRODUCTS_EXPORT_HEADERS,
    SALES_EXPORT_HEADERS,
    drift_report,
    products_export_rows,
    products_report_filename,
    sales_export_rows,
    sales_name_from_notes,
    sales_report_filename,
    sales_stats,
    write_csv,
)

__all__ = [
    "DriftRow",
    "PRODUCTS_EXPORT_HEADERS",
    "SALES_EXPORT_HEADERS",
    "drift_report",
    "products_export_rows",
    "products_report_filename",
    "sales_export_rows",
    "sales_name_from_notes",
    "sales_report_filename",
    "sales_stats",
    "write_csv",
]
