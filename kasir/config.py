from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

from .constants import DATA_DIR, DB_FILE_NAME

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR.parent / DATA_DIR
DB_PATH = DATA_PATH / DB_FILE_NAME
TEMPLATES_DIR = BASE_DIR / "templates"


@dataclass(frozen=True)
class StoreSettings:
    """
    Store identity and receipt texts, read from the ``settings`` table.

    Passed explicitly to whatever renders a document; nothing reads these
    from module state.
    """
    store_name: Optional[str] = None
    store_address: Optional[str] = None
    store_phone: Optional[str] = None
    store_email: Optional[str] = None
    store_website: Optional[str] = None
    company_logo: Optional[str] = None
    receipt_header: Optional[str] = None
    receipt_footer: Optional[str] = None
    payment_note_line1: Optional[str] = None
    payment_note_line2: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> "StoreSettings":
        """Build from a key/value mapping, ignoring unknown keys and blank values."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            if key in known and value is not None and str(value).strip():
                kwargs[key] = str(value)
        return cls(**kwargs)
