# app/core/errors.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.exc import IntegrityError


class WarehouseError(Exception):
    """Базовая ошибка сервиса. Превращается в JSON-ответ обработчиком в app.main."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(WarehouseError):
    status_code = 400
    default_message = "Validation error"


class UnauthorizedError(WarehouseError):
    status_code = 401
    default_message = "User not logged in"


class ForbiddenError(WarehouseError):
    status_code = 403
    default_message = "You do not have access to this business"


class NotFoundError(WarehouseError):
    status_code = 404
    default_message = "Not found"


class ConflictError(WarehouseError):
    status_code = 409
    default_message = "Conflict"


def pg_error_info(e: IntegrityError):
    orig = getattr(e, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    diag = getattr(orig, "diag", None)
    detail = (
        getattr(diag, "message_detail", None)
        or getattr(diag, "message_primary", None)
        or getattr(orig, "pgerror", None)
        or str(e)
    )
    meta = {
        "table": getattr(diag, "table_name", None),
        "column": getattr(diag, "column_name", None),
        "constraint": getattr(diag, "constraint_name", None),
    }
    return code, detail, meta


def integrity_to_error(e: IntegrityError, conflict_message: str) -> WarehouseError:
    """Транслирует ошибку целостности БД в ошибку сервиса (по SQLSTATE)."""
    code, detail, _ = pg_error_info(e)
    # sqlite не отдаёт SQLSTATE, узнаём уникальность по тексту
    if code == "23505" or "UNIQUE constraint failed" in str(detail):
        return ConflictError(conflict_message)
    if code == "23502":  # not_null_violation
        return ValidationError("Missing required field (NOT NULL violation)")
    return WarehouseError(f"Integrity error: {detail}")
