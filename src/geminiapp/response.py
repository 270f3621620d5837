"""Read-only view over a generate-content response payload."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _freeze(value: Any) -> Any:
    """Copy *value* into read-only mapping proxies and tuples, all the way down."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    """Plain dict/list copy of a frozen value."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def _as_sequence(value: Any) -> Sequence[Any]:
    return value if isinstance(value, tuple) else ()


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True, eq=False)
class GenerateContentResponse:
    """Immutable response value with derived accessors.

    The payload is copied into nested read-only proxies and tuples on
    construction, so neither the caller's dict nor anything read back through
    ``raw`` or ``candidates`` can change what the accessors report. Missing or
    malformed nested fields yield empty defaults instead of raising.
    """

    raw: Mapping[str, Any] = field(repr=False)

    def __post_init__(self) -> None:
        """Freeze the payload."""
        object.__setattr__(self, "raw", _freeze(dict(self.raw)))

    @property
    def candidates(self) -> Sequence[Any]:
        """Response candidates, empty when absent."""
        return _as_sequence(self.raw.get("candidates"))

    @property
    def usage_metadata(self) -> Mapping[str, Any]:
        """Token usage block, empty when absent."""
        return _as_mapping(self.raw.get("usageMetadata"))

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the payload."""
        return _thaw(self.raw)

    def _first_candidate_parts(self) -> Sequence[Any]:
        candidates = self.candidates
        if not candidates:
            return ()
        content = _as_mapping(_as_mapping(candidates[0]).get("content"))
        return _as_sequence(content.get("parts"))

    def text(self) -> str:
        """Concatenate the text of every text-bearing part of the first candidate."""
        return "".join(
            part["text"]
            for part in self._first_candidate_parts()
            if isinstance(part, Mapping) and isinstance(part.get("text"), str)
        )

    def function_call(self) -> Any:
        """Return a copy of the first ``functionCall`` of the first candidate, or ``""``."""
        for part in self._first_candidate_parts():
            if isinstance(part, Mapping) and part.get("functionCall"):
                return _thaw(part["functionCall"])
        return ""
