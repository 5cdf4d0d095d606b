"""
Loose JSON list decoder.

Feeds served to the desktop are "a JSON array of flat objects" by
convention only: trailing commas, truncated tails and the occasional
hand-edited entry are common. Rather than fail the whole list, the decoder
splits the text into candidate object strings with a brace-depth scan and
decodes each candidate on its own.

The scan counts ``{`` and ``}`` without tracking string literals, so a brace
inside a quoted value shifts the depth for the rest of the input. Entries
after such a value are lost or merged into one undecodable candidate.

A ``}`` seen at depth zero is skipped instead of driving the depth
negative, so the entries after a stray closing brace are still recovered.
"""

from __future__ import annotations

import json
from typing import Any, Generic, List, Optional, Type, TypeVar

from portfolios.core.logging_utils import get_module_logger

from .records import JsonRecord, RecordDecodeError

R = TypeVar("R", bound=JsonRecord)

logger = get_module_logger("LooseJsonListDecoder")

_PREVIEW_CHARS = 100


def split_candidates(raw: Optional[str]) -> List[str]:
    """Split ``raw`` into balanced ``{...}`` substrings, in input order."""
    if not raw:
        return []

    text = raw.strip()
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    text = text.rstrip(", \t\r\n")

    candidates: List[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}":
            if depth == 0:
                continue
            depth -= 1
            if depth == 0:
                candidates.append(text[start:index + 1])

    if depth:
        logger.debug("Dropped unbalanced tail starting at offset %d", start)
    return candidates


class LooseJsonListDecoder(Generic[R]):
    """Decode a loose JSON array into records of ``record_type``.

    Records whose ``key_field`` is empty are discarded. The decoder keeps no
    state between calls and may be shared freely.
    """

    def __init__(self, record_type: Type[R], *, key_field: str = "name"):
        self.record_type = record_type
        self.key_field = key_field

    def decode(self, raw: Optional[str]) -> List[R]:
        if raw is None or not raw.strip():
            return []

        records: List[R] = []
        candidates = split_candidates(raw)
        for index, candidate in enumerate(candidates):
            record = self._decode_candidate(index, candidate)
            if record is None:
                continue
            if not getattr(record, self.key_field, ""):
                logger.warning(
                    "Skipping %s %d: empty '%s'", self.record_type.__name__, index, self.key_field
                )
                continue
            records.append(record)

        logger.debug(
            "Decoded %d/%d %s candidates", len(records), len(candidates), self.record_type.__name__
        )
        return records

    def _decode_candidate(self, index: int, candidate: str) -> Optional[R]:
        try:
            data: Any = json.loads(candidate)
            if not isinstance(data, dict):
                raise RecordDecodeError(self.record_type.__name__, "<root>", "not a JSON object")
            return self.record_type.from_mapping(data)
        except (json.JSONDecodeError, RecordDecodeError) as exc:
            logger.warning(
                "Failed to parse %s %d: %s | %s",
                self.record_type.__name__,
                index,
                exc,
                candidate[:_PREVIEW_CHARS],
            )
            return None


def decode_records(raw: Optional[str], record_type: Type[R], *, key_field: str = "name") -> List[R]:
    return LooseJsonListDecoder(record_type, key_field=key_field).decode(raw)


__all__ = ["split_candidates", "LooseJsonListDecoder", "decode_records"]
