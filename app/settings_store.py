"""
Settings table access and secret encryption
Settings are plain strings; structured settings are stored as JSON documents.
"""

import copy
import json
import logging
from typing import Any, Iterable, Optional

from cryptography.fernet import Fernet
from sqlalchemy.orm import Session

from .config import SMTP_ENCRYPTION_KEY
from .models import Setting

logger = logging.getLogger(__name__)

# Initialize encryption
fernet = Fernet(SMTP_ENCRYPTION_KEY) if SMTP_ENCRYPTION_KEY else None


def encrypt_password(password: str) -> str:
    """Encrypt SMTP password for storage"""
    if not fernet:
        logger.warning("SMTP_ENCRYPTION_KEY not set, storing password in plain text")
        return password
    return fernet.encrypt(password.encode()).decode()


def decrypt_password(encrypted: Optional[str]) -> str:
    """Decrypt SMTP password for use"""
    if not fernet or not encrypted:
        return encrypted or ""
    try:
        return fernet.decrypt(encrypted.encode()).decode()
    except Exception:
        return encrypted  # Fallback if not encrypted


def get_settings_map(db: Session, keys: Iterable[str]) -> dict[str, str]:
    """Return {key: value} for the requested keys that exist"""
    rows = db.query(Setting).filter(Setting.key.in_(list(keys))).all()
    return {row.key: row.value for row in rows if row.value is not None}


def get_setting(db: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    row = db.query(Setting).filter(Setting.key == key).first()
    if not row or row.value is None:
        return default
    return row.value


def set_settings(db: Session, values: dict[str, Optional[str]]) -> None:
    """Upsert several settings in one commit"""
    for key, value in values.items():
        row = db.query(Setting).filter(Setting.key == key).first()
        if not row:
            row = Setting(key=key)
            db.add(row)
        row.value = value
    db.commit()


def get_json_setting(db: Session, key: str, default: Any) -> Any:
    """Load a JSON document, returning a copy of the default when missing or corrupt"""
    raw = get_setting(db, key)
    if raw is None:
        return copy.deepcopy(default)
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"❌ Invalid JSON in setting {key}: {e}")
        return copy.deepcopy(default)


def set_json_setting(db: Session, key: str, value: Any) -> None:
    set_settings(db, {key: json.dumps(value)})
