from typing import Optional

from app.core.errors import ValidationError


def normalize_code(code: Optional[str]) -> str:
    """Код зоны/стеллажа/склада: trim + upper. "z1 " -> "Z1"."""
    return (code or "").strip().upper()


def require_text(value: Optional[str], label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    return text
