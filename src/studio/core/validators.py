import re
from uuid import UUID

from src.studio.core.errors import ValidationFailed

# Canonical 8-4-4-4-12 hex form only; no braces, urn: prefix or bare hex
_UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def is_valid_entity_id(value: object) -> bool:
    """Check that value is a UUID or a string in 8-4-4-4-12 hex form."""
    if isinstance(value, UUID):
        return True
    return isinstance(value, str) and _UUID_PATTERN.fullmatch(value) is not None


def parse_entity_id(value: object, field: str = "id") -> UUID:
    """Parse an entity id, raising ValidationFailed on malformed input."""
    if isinstance(value, UUID):
        return value
    if not is_valid_entity_id(value):
        raise ValidationFailed(
            f"Invalid {field}: expected a UUID, got {value!r}",
            code=400,
            details={"field": field},
        )
    return UUID(str(value))
