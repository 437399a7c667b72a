"""
Serialization utilities for cloudscore value objects.

Result types (Score, PagedList, PostedGameScore, PageRequest) are immutable
dataclasses; this module turns them into JSON-compatible structures for
logging, the command line and callers who persist results themselves:
- Datetime → ISO format
- Enum → value
- Nested dataclasses → recursive to_dict()
- Excluded and private fields are never serialized

Usage:
    from cloudscore.serialization import serialize_value

    page = await scores.list("arena")
    print(json.dumps(serialize_value(page)))
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping


def serialize_value(value: Any) -> Any:
    """Recursively serialize a value for JSON export.

    Handles:
    - None → None
    - datetime → ISO format string (with UTC if no timezone)
    - Enum → value
    - Objects with to_dict() → recursive serialization
    - Mapping → dict with serialized values
    - List/tuple/other sequences of results → list

    Args:
        value: Any value to serialize

    Returns:
        JSON-serializable value
    """
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {str(k): serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


class SerializableMixin:
    """Mixin providing consistent serialization for dataclasses.

    Subclasses should be decorated with @dataclass.

    Configuration:
    - _exclude_fields: Tuple of field names to exclude from serialization
    """

    _exclude_fields: ClassVar[tuple[str, ...]] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary with consistent datetime/enum handling.

        Raises:
            TypeError: If the class is not a dataclass
        """
        if not is_dataclass(self):
            raise TypeError(f"{self.__class__.__name__} must be a dataclass")

        result: Dict[str, Any] = {}
        for f in fields(self):
            if f.name in self._exclude_fields or f.name.startswith("_"):
                continue
            result[f.name] = serialize_value(getattr(self, f.name))
        return result


__all__ = [
    "SerializableMixin",
    "serialize_value",
]
