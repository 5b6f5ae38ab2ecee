from __future__ import annotations

import sqlite3

from ...config import StoreSettings


class SettingsRepo:
    """Key/value store settings (store name, receipt texts, payment notes)."""

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def get_all(self) -> dict[str, str | None]:
        rows = self.conn.execute("SELECT key, value FROM settings").fetchall()
        return {r["key"]: r["value"] for r in rows}

    def set(self, key: str, value: str | None) -> None:
        with self.conn:
            self.conn.execute(
                "INSERT INTO settings(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def store_settings(self) -> StoreSettings:
        return StoreSettings.from_mapping(self.get_all())
