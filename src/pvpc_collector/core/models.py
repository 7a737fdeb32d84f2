from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final

from pvpc_collector.core.errors import DecodeError

_RFC3339_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(value: Any) -> datetime:
    if not isinstance(value, str):
        raise DecodeError(f"datetime must be an RFC 3339 string, got {type(value).__name__}")
    if _RFC3339_PATTERN.match(value) is None:
        raise DecodeError(f"datetime is not RFC 3339: {value!r}")
    try:
        return datetime.fromisoformat(value.upper())
    except ValueError as exc:
        raise DecodeError(f"datetime is not RFC 3339: {value!r}") from exc


def _number(payload: dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{key} must be a number, got {type(value).__name__}")
    return float(value)


def _string(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _array(payload: dict[str, Any], key: str) -> list[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"{key} must be an array, got {type(value).__name__}")
    return value


def _ensure_object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"{what} must be an object, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class Entry:
    value: float = 0.0
    percentage: float = 0.0
    timestamp: datetime | None = None

    @classmethod
    def from_json(cls, payload: Any) -> Entry:
        data = _ensure_object(payload, "entry")
        return cls(
            value=_number(data, "value"),
            percentage=_number(data, "percentage"),
            timestamp=parse_rfc3339(data["datetime"]) if "datetime" in data else None,
        )


@dataclass(frozen=True, slots=True)
class Attributes:
    title: str = ""
    values: tuple[Entry, ...] = ()

    @classmethod
    def from_json(cls, payload: Any) -> Attributes:
        data = _ensure_object(payload, "attributes")
        return cls(
            title=_string(data, "title"),
            values=tuple(Entry.from_json(item) for item in _array(data, "values")),
        )


@dataclass(frozen=True, slots=True)
class Entity:
    type: str = ""
    id: str = ""
    attributes: Attributes = field(default_factory=Attributes)

    @classmethod
    def from_json(cls, payload: Any) -> Entity:
        data = _ensure_object(payload, "entity")
        return cls(
            type=_string(data, "type"),
            id=_string(data, "id"),
            attributes=Attributes.from_json(data.get("attributes")),
        )


@dataclass(frozen=True, slots=True)
class PriceEnvelope:
    """Decoded body of the REE market prices endpoint.

    Only the ``included`` array is read; every other top-level key is ignored.
    Missing keys decode to empty values, while keys of the wrong JSON type abort
    the whole decode with :class:`DecodeError`.
    """

    entities: tuple[Entity, ...] = ()

    @classmethod
    def from_json(cls, payload: Any) -> PriceEnvelope:
        data = _ensure_object(payload, "envelope")
        return cls(entities=tuple(Entity.from_json(item) for item in _array(data, "included")))

    @classmethod
    def from_bytes(cls, body: bytes) -> PriceEnvelope:
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"response body is not valid JSON: {exc}") from exc
        return cls.from_json(payload)

    def first_values(self) -> tuple[Entry, ...]:
        if not self.entities:
            return ()
        return self.entities[0].attributes.values


@dataclass(frozen=True, slots=True)
class Sample:
    measurement: str
    fields: dict[str, float]
    tags: dict[str, str]
    timestamp: datetime | None
