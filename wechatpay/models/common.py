"""
Helpers shared by the request/response data models.
"""
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from ..exceptions import MalformedPayloadError


T = TypeVar("T")


def compact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values and empty lists, serializing nested models and enums."""
    result = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, list):
            if not value:
                continue
            value = [_serialize(v) for v in value]
        else:
            value = _serialize(value)
        result[key] = value
    return result


def _serialize(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    return value


def require(data: Dict[str, Any], key: str, model: str) -> Any:
    """Fetch a required key, raising MalformedPayloadError when absent."""
    if not isinstance(data, dict):
        raise MalformedPayloadError(f"{model} must be an object")
    if key not in data or data[key] is None:
        raise MalformedPayloadError(f"{model} missing field: {key}", {"field": key})
    return data[key]


def optional_model(data: Optional[Dict[str, Any]], factory: Callable[[Dict[str, Any]], T]) -> Optional[T]:
    return factory(data) if data is not None else None


def model_list(items: Optional[List[Dict[str, Any]]], factory: Callable[[Dict[str, Any]], T]) -> List[T]:
    return [factory(item) for item in (items or [])]


def parse_enum(enum_cls: Type[Enum], value: Any, label: str):
    """Exact enum lookup by wire value; unknown values are errors."""
    if not isinstance(value, str):
        raise MalformedPayloadError(f"unknown {label}: {value}")
    try:
        return enum_cls(value)
    except ValueError:
        raise MalformedPayloadError(f"unknown {label}: {value}")
