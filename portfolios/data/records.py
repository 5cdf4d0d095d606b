"""Flat records decoded from the remote project/timeline feeds.

Records are declared as dataclasses; ``from_mapping`` performs a strict
field decode: unknown keys are ignored, missing keys keep their defaults
(empty string, zero, False, or an empty nested record) and a value of the
wrong JSON type raises :class:`RecordDecodeError`.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

R = TypeVar("R", bound="JsonRecord")


class RecordDecodeError(ValueError):
    """A JSON object could not be decoded into a record."""

    def __init__(self, record_type: str, field_name: str, message: str):
        super().__init__(f"{record_type}.{field_name}: {message}")
        self.record_type = record_type
        self.field_name = field_name


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise TypeError(f"expected string, got {type(value).__name__}")


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise TypeError(f"expected integer, got {type(value).__name__} {value!r}")


def _coerce_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected number, got {type(value).__name__}")
    return float(value)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise TypeError(f"expected bool, got {type(value).__name__}")


_COERCERS = {
    str: _coerce_str,
    int: _coerce_int,
    float: _coerce_float,
    bool: _coerce_bool,
}


@dataclass
class JsonRecord:
    """Base class for records with one level of optional nesting."""

    @classmethod
    def _field_types(cls) -> Dict[str, Any]:
        cache_name = f"_{cls.__name__}__field_types"
        cached = cls.__dict__.get(cache_name)
        if cached is None:
            hints = typing.get_type_hints(cls)
            cached = {f.name: hints[f.name] for f in dataclasses.fields(cls)}
            setattr(cls, cache_name, cached)
        return cached

    @classmethod
    def from_mapping(cls: Type[R], data: Mapping[str, Any]) -> R:
        if not isinstance(data, Mapping):
            raise RecordDecodeError(cls.__name__, "<root>", f"expected object, got {type(data).__name__}")

        values: Dict[str, Any] = {}
        for name, field_type in cls._field_types().items():
            if name not in data:
                continue
            raw = data[name]
            try:
                values[name] = _decode_value(field_type, raw)
            except RecordDecodeError:
                raise
            except TypeError as exc:
                raise RecordDecodeError(cls.__name__, name, str(exc)) from exc
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _decode_value(field_type: Any, raw: Any) -> Any:
    if isinstance(field_type, type) and issubclass(field_type, JsonRecord):
        if raw is None:
            return field_type()
        if not isinstance(raw, Mapping):
            raise TypeError(f"expected object, got {type(raw).__name__}")
        return field_type.from_mapping(raw)

    coercer = _COERCERS.get(field_type)
    if coercer is None:
        raise TypeError(f"unsupported field type {field_type!r}")
    return coercer(raw)


@dataclass
class GitHubRepo(JsonRecord):
    name: str = ""
    description: str = ""
    html_url: str = ""
    language: str = ""
    stargazers_count: int = 0
    forks_count: int = 0
    updated_at: str = ""
    fork: bool = False
    homepage: str = ""


@dataclass
class HackathonLinks(JsonRecord):
    github: str = ""
    itch: str = ""
    site: str = ""
    devpost: str = ""

    def project_link(self) -> Tuple[Optional[str], str]:
        """Best outward link and its button label (itch > site > devpost)."""
        if self.itch:
            return self.itch, "Play Game"
        if self.site:
            return self.site, "View Site"
        if self.devpost:
            return self.devpost, "View Project"
        return None, "View Project"


@dataclass
class HackathonEvent(JsonRecord):
    name: str = ""
    date: str = ""
    description: str = ""
    location: str = ""
    links: HackathonLinks = field(default_factory=HackathonLinks)


__all__ = [
    "RecordDecodeError",
    "JsonRecord",
    "GitHubRepo",
    "HackathonLinks",
    "HackathonEvent",
]
