DEFAULT_SETTINGS = {
    "store_name": "Toko Kasir",
    "receipt_footer": "Terima kasih atas kunjungan Anda",
}


def seed(conn):
    # settings rows are only added when missing; user edits are never overwritten
    for key, value in DEFAULT_SETTINGS.items():
        conn.execute(
            "INSERT OR IGNORE INTO settings(key, value) VALUES (?, ?)",
            (key, value),
        )
