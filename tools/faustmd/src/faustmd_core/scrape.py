from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .common import ScrapeError, unescape_c_string

_logger = logging.getLogger(__name__)

_RE_STRLIT = r'"(?:\\.|[^"\\])*"'
_RE_IDENT = r"[a-zA-Z_][0-9a-zA-Z_]*"

GLOBAL_DECLARE_RE = re.compile(rf"^\s*m->declare\(({_RE_STRLIT}), ({_RE_STRLIT})\);")
WIDGET_DECLARE_RE = re.compile(
    rf"^\s*ui_interface->declare\(&({_RE_IDENT}), ({_RE_STRLIT}), ({_RE_STRLIT})\);"
)


@dataclass(frozen=True)
class RecoveredRecord:
    """A key/value declaration recovered from generated source.

    ``var`` is the widget storage identifier, or None for a global entry.
    """

    key: str
    value: str
    var: str | None = None

    @property
    def is_global(self) -> bool:
        return self.var is None


def has_explicit_metadata(root: ET.Element) -> bool:
    return any(node is not root for node in root.iter("meta"))


def parse_declaration(line: str) -> RecoveredRecord | None:
    match = GLOBAL_DECLARE_RE.fullmatch(line)
    if match:
        key = unescape_c_string(match.group(1))
        value = unescape_c_string(match.group(2))
        if key is None or value is None:
            return None
        return RecoveredRecord(key=key, value=value)

    match = WIDGET_DECLARE_RE.fullmatch(line)
    if match:
        key = unescape_c_string(match.group(2))
        value = unescape_c_string(match.group(3))
        if key is None or value is None:
            return None
        return RecoveredRecord(key=key, value=value, var=match.group(1))

    return None


def scrape_lines(lines: Iterable[str]) -> list[RecoveredRecord]:
    records: list[RecoveredRecord] = []
    for line in lines:
        record = parse_declaration(line.rstrip("\r\n"))
        if record is not None:
            records.append(record)
    return records


def scrape_source(path: Path) -> list[RecoveredRecord]:
    try:
        with path.open("r", encoding="utf-8", errors="replace", newline="") as handle:
            records = scrape_lines(handle)
    except OSError as exc:
        raise ScrapeError(f"Unable to read generated source '{path}': {exc}") from exc

    _logger.debug(
        "recovered %d global and %d widget declarations from %s",
        sum(1 for record in records if record.is_global),
        sum(1 for record in records if not record.is_global),
        path,
    )
    return records
