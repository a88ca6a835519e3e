from __future__ import annotations

from typing import Any

from ..core.enums import Role, Weekday
from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return number


def require_weekday(value: Any) -> Weekday:
    if isinstance(value, Weekday):
        return value
    text = str(value or "").strip().capitalize()
    try:
        return Weekday(text)
    except ValueError:
        raise ValidationError(f"invalid day: {value!r}")


def require_role(current_role: Role | str | None, *allowed: Role) -> Role:
    try:
        role = Role(current_role)
    except ValueError:
        raise AuthorizationError("Unauthorized")
    if role not in allowed:
        raise AuthorizationError("Unauthorized")
    return role


def require_tenant(tenant_id: Any) -> str:
    tenant = str(tenant_id or "").strip()
    if not tenant:
        raise AuthorizationError("missing tenant context")
    return tenant


def require_context(tenant_id: Any, teacher_id: Any) -> tuple[str, str]:
    """The caller must arrive with a resolved school and teacher."""
    tenant = require_tenant(tenant_id)
    teacher = str(teacher_id or "").strip()
    if not teacher:
        raise AuthorizationError("missing teacher context")
    return tenant, teacher
