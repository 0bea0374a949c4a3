"""Transform decoded Cider JSON values into typed field values.

Cider omits attributes it cannot provide instead of sending null, so every
helper here keeps "absent" (``None``) apart from "present but falsy"
(``0``, ``False``, ``""``).
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Union

TypeSpec = Union[Type, Tuple[Type, ...]]
E = TypeVar("E", bound=Enum)


class PayloadError(ValueError):
    """A JSON payload does not have the shape a model expects."""


def _type_name(expected: TypeSpec) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def coerce(key: str, value: Any, expected: TypeSpec) -> Any:
    """Check a JSON value against the expected Python type.

    JSON has no separate integer type for booleans, but Python does:
    ``True`` is never accepted where a number is expected. Integral floats
    are accepted for ``int`` and ints are widened for ``float``.

    Args:
        key: JSON key, used in error messages
        value: Decoded JSON value
        expected: Type (or tuple of types) the value must have

    Returns:
        The value, converted where a lossless conversion exists

    Raises:
        PayloadError: If the value has the wrong type

    Examples:
        >>> coerce("durationInMillis", 234000, int)
        234000
        >>> coerce("remainingTime", 191, float)
        191.0
    """
    if expected is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif expected is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif expected is bool:
        if isinstance(value, bool):
            return value
    elif isinstance(value, expected):
        return value

    raise PayloadError(
        f"Field '{key}' should be {_type_name(expected)}, got {type(value).__name__}"
    )


def expect_object(data: Any, what: str) -> Dict[str, Any]:
    """Ensure a decoded JSON value is an object.

    Raises:
        PayloadError: If ``data`` is not a dict
    """
    if not isinstance(data, dict):
        raise PayloadError(f"Expected {what} to be a JSON object, got {type(data).__name__}")
    return data


def required_field(data: Dict[str, Any], key: str, expected: TypeSpec) -> Any:
    """Read a field that must be present.

    Raises:
        PayloadError: If the key is missing, null or of the wrong type
    """
    if data.get(key) is None:
        raise PayloadError(f"Missing required field '{key}'")
    return coerce(key, data[key], expected)


def optional_field(data: Dict[str, Any], key: str, expected: TypeSpec) -> Optional[Any]:
    """Read a field that may be absent.

    Returns:
        ``None`` if the key is absent or null, otherwise the checked value
        (falsy values are returned as-is)
    """
    value = data.get(key)
    if value is None:
        return None
    return coerce(key, value, expected)


def string_tuple(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    """Read a list of strings, treating an absent key as empty.

    Examples:
        >>> string_tuple({"genreNames": ["Electronic", "Music"]}, "genreNames")
        ('Electronic', 'Music')
        >>> string_tuple({}, "audioTraits")
        ()
    """
    values = data.get(key)
    if values is None:
        return ()
    if not isinstance(values, list):
        raise PayloadError(f"Field '{key}' should be a list, got {type(values).__name__}")
    return tuple(coerce(key, value, str) for value in values)


def object_list(data: Dict[str, Any], key: str) -> Tuple[Dict[str, Any], ...]:
    """Read a list of JSON objects, treating an absent key as empty."""
    values = data.get(key)
    if values is None:
        return ()
    if not isinstance(values, list):
        raise PayloadError(f"Field '{key}' should be a list, got {type(values).__name__}")
    return tuple(expect_object(value, key) for value in values)


def enum_field(data: Dict[str, Any], key: str, enum_cls: Type[E]) -> E:
    """Read a required integer field and map it onto ``enum_cls``.

    Raises:
        PayloadError: If the field is missing or holds an unknown value
    """
    value = required_field(data, key, int)
    try:
        return enum_cls(value)
    except ValueError:
        raise PayloadError(f"Field '{key}' has unknown value {value}") from None
