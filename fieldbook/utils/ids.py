# fieldbook/utils/ids.py
from typing import Union
from uuid import UUID


def to_uuid(value: Union[str, UUID]) -> UUID:
    """Normalise an id received as text or UUID. Raises ValueError when malformed."""
    if isinstance(value, UUID):
        return value
    return UUID(str(value))
