import re
from uuid import UUID

from vodshop.errors import InvalidIdentifier

def validate_password_strength(v: str) -> str:
    if len(v or "") < 8:
        raise ValueError('Password must be at least 8 characters long')
    if not re.search(r'[A-Za-z]', v):
        raise ValueError('Password must contain at least one letter')
    if not re.search(r'\d', v):
        raise ValueError('Password must contain at least one digit')
    return v

def validate_username(v: str) -> str:
    v = (v or "").strip()
    if not re.fullmatch(r'[A-Za-z0-9_.-]{3,32}', v):
        raise ValueError('Username must be 3-32 characters (letters, digits, _ . -)')
    return v

def validate_object_id(value: str, label: str = "id") -> str:
    """Vérifie qu'un identifiant de document est un UUID; lève InvalidIdentifier sinon."""
    raw = str(value or "").strip()
    try:
        return str(UUID(raw))
    except (ValueError, AttributeError, TypeError):
        raise InvalidIdentifier(f"Invalid {label} format")
