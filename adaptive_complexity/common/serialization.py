"""
Serialization Utilities

Helpers for turning engine models into plain dictionaries and JSON so that
callers can persist learning profiles and audit records in any store.
"""

import json
import datetime
from enum import Enum
from typing import Any, Dict, Type, TypeVar

# Type variable for generic typing
T = TypeVar('T', bound='SerializableMixin')


def serialize(obj: Any) -> Any:
    """
    Convert an object into JSON-compatible primitives.

    Enums become their value, datetimes become ISO-8601 strings, tuples and
    sets become lists, and enum dictionary keys are replaced by their value.
    Objects exposing ``to_dict`` are serialized through it.

    Args:
        obj: The object to serialize

    Returns:
        JSON-compatible representation
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, (datetime.datetime, datetime.date)):
        return obj.isoformat()

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [serialize(item) for item in obj]

    if isinstance(obj, dict):
        return {
            (key.value if isinstance(key, Enum) else key): serialize(value)
            for key, value in obj.items()
        }

    if hasattr(obj, 'to_dict') and callable(getattr(obj, 'to_dict')):
        return serialize(obj.to_dict())

    return str(obj)


def parse_datetime(value: Any) -> datetime.datetime:
    """
    Parse an ISO-8601 string (or pass through a datetime).

    Raises:
        ValueError: If the value cannot be interpreted as a datetime
    """
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, str):
        return datetime.datetime.fromisoformat(value)
    raise ValueError(f"Cannot interpret {value!r} as a datetime")


def to_json(obj: Any, pretty: bool = False) -> str:
    """
    Serialize an object to a JSON string.

    Args:
        obj: The object to serialize
        pretty: Whether to format the JSON with indentation

    Returns:
        JSON string representation
    """
    indent = 2 if pretty else None
    return json.dumps(serialize(obj), indent=indent, ensure_ascii=False)


class SerializableMixin:
    """
    Mixin adding JSON round-tripping to classes that implement
    ``to_dict`` and a ``from_dict`` classmethod.
    """

    def to_dict(self) -> Dict[str, Any]:  # pragma: no cover - implemented by subclasses
        raise NotImplementedError

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:  # pragma: no cover
        raise NotImplementedError

    def to_json(self, pretty: bool = False) -> str:
        """Convert the object to a JSON string."""
        return to_json(self.to_dict(), pretty)

    @classmethod
    def from_json(cls: Type[T], json_str: str) -> T:
        """Create an instance from a JSON string."""
        return cls.from_dict(json.loads(json_str))
