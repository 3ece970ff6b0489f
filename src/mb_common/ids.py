"""Row ids are UUIDs. Malformed ids are rejected as input errors before any SQL runs."""

import uuid
from typing import Annotated

from pydantic import AfterValidator


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def _canonical_uuid(value: str) -> str:
    if not is_uuid(value):
        raise ValueError("must be a UUID")
    return str(uuid.UUID(value))


# Request-body id field: validated as a UUID, kept as its canonical string form.
UuidStr = Annotated[str, AfterValidator(_canonical_uuid)]
