from typing import Optional

from ..errors import InvalidInputError


def require_text(value: Optional[str], message: str) -> str:
    """Return ``value`` unchanged, or raise InvalidInputError if it is missing or blank."""
    if value is None or not value.strip():
        raise InvalidInputError(message)
    return value
