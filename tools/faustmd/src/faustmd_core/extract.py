from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path

from .common import ExtractionError, ReportError, is_decimal_integer
from .model import Metadata, Scale, Widget, WidgetType
from .scrape import RecoveredRecord

_logger = logging.getLogger(__name__)

REPORT_ROOT_TAG = "faust"
ACTIVE_GROUP_PATH = "ui/activewidgets/widget"
PASSIVE_GROUP_PATH = "ui/passivewidgets/widget"


def load_report(path: Path) -> ET.Element:
    try:
        tree = ET.parse(path)
    except OSError as exc:
        raise ReportError(f"Unable to read compiler report '{path}': {exc}") from exc
    except ET.ParseError as exc:
        raise ReportError(f"Invalid compiler report '{path}': {exc}") from exc
    root = tree.getroot()
    if root.tag != REPORT_ROOT_TAG:
        raise ReportError(f"Compiler report '{path}' has root <{root.tag}>, expected <{REPORT_ROOT_TAG}>.")
    return root


def _child_text(node: ET.Element, name: str) -> str:
    return node.findtext(name, default="") or ""


def _parse_int(text: str, label: str) -> int:
    stripped = text.strip()
    try:
        if "_" in stripped:
            raise ValueError(stripped)
        return int(stripped)
    except ValueError as exc:
        raise ExtractionError(f"{label} is missing or not an integer: {text!r}") from exc


def _parse_float(text: str, label: str) -> float:
    stripped = text.strip()
    try:
        # float() accepts digit separators such as "1_0"
        if "_" in stripped:
            raise ValueError(stripped)
        value = float(stripped)
    except ValueError as exc:
        raise ExtractionError(f"{label} is missing or not a number: {text!r}") from exc
    if not math.isfinite(value):
        raise ExtractionError(f"{label} must be a finite number: {text!r}")
    return value


def _parse_count(root: ET.Element, name: str) -> int:
    value = _parse_int(_child_text(root, name), f"<{name}>")
    if value < 0:
        raise ExtractionError(f"<{name}> must be non-negative, got {value}")
    return value


def _meta_pairs(node: ET.Element) -> list[tuple[str, str]]:
    return [(meta.get("key", ""), meta.text or "") for meta in node.findall("meta")]


def _widget_owner_map(root: ET.Element) -> dict[str, tuple[bool, int]]:
    # Later widgets win for a duplicated storage identifier.
    owners: dict[str, tuple[bool, int]] = {}
    for index, node in enumerate(root.findall(ACTIVE_GROUP_PATH)):
        owners[_child_text(node, "varname")] = (True, index)
    for index, node in enumerate(root.findall(PASSIVE_GROUP_PATH)):
        owners[_child_text(node, "varname")] = (False, index)
    return owners


def _group_recovered(
    root: ET.Element, recovered: Iterable[RecoveredRecord]
) -> tuple[list[tuple[str, str]], dict[tuple[bool, int], list[tuple[str, str]]]]:
    global_pairs: list[tuple[str, str]] = []
    widget_pairs: dict[tuple[bool, int], list[tuple[str, str]]] = {}
    owners: dict[str, tuple[bool, int]] | None = None

    for record in recovered:
        if record.is_global:
            global_pairs.append((record.key, record.value))
            continue
        if owners is None:
            owners = _widget_owner_map(root)
        owner = owners.get(record.var or "")
        if owner is None:
            _logger.debug("dropping declaration %r for unknown widget %s", record.key, record.var)
            continue
        widget_pairs.setdefault(owner, []).append((record.key, record.value))

    return global_pairs, widget_pairs


def apply_widget_metadata(widget: Widget, pairs: Iterable[tuple[str, str]]) -> None:
    for key, value in pairs:
        # the report generator emits bare byte offsets as keys
        if is_decimal_integer(key) and not value:
            continue
        widget.metadata.append((key, value))

        if key == "unit":
            widget.unit = value
        elif key == "scale":
            scale = Scale.from_name(value)
            if scale is None:
                _logger.warning("Unrecognized scale type `%s` on widget %r", value, widget.label)
                scale = Scale.LINEAR
            widget.scale = scale
        elif key == "tooltip":
            widget.tooltip = value


def extract_widget(
    node: ET.Element,
    is_active: bool,
    extra_pairs: Iterable[tuple[str, str]] = (),
) -> Widget:
    type_name = node.get("type", "")
    widget_type = WidgetType.from_name(type_name)
    if widget_type is None:
        raise ExtractionError(f"Unrecognized widget type `{type_name}`")
    if widget_type.is_active != is_active:
        group = "active" if is_active else "passive"
        raise ExtractionError(f"Widget type `{type_name}` is not allowed among {group} widgets")

    widget = Widget(
        type=widget_type,
        id=_parse_int(node.get("id", ""), f"{type_name} widget id"),
        label=_child_text(node, "label"),
        var=_child_text(node, "varname"),
    )
    where = f"{type_name} widget {widget.label!r}"

    if widget_type.is_discrete:
        widget.init, widget.min, widget.max, widget.step = 0.0, 0.0, 1.0, 1.0
    elif is_active:
        widget.init = _parse_float(_child_text(node, "init"), f"{where} <init>")
        widget.min = _parse_float(_child_text(node, "min"), f"{where} <min>")
        widget.max = _parse_float(_child_text(node, "max"), f"{where} <max>")
        widget.step = _parse_float(_child_text(node, "step"), f"{where} <step>")
    else:
        widget.min = _parse_float(_child_text(node, "min"), f"{where} <min>")
        widget.max = _parse_float(_child_text(node, "max"), f"{where} <max>")

    apply_widget_metadata(widget, _meta_pairs(node))
    apply_widget_metadata(widget, extra_pairs)
    return widget


def extract_metadata(root: ET.Element, recovered: Iterable[RecoveredRecord] = ()) -> Metadata:
    """Build the canonical model from a compiler report.

    Records recovered from generated source are merged after the report's
    own entries, in the order they were recovered.
    """
    global_pairs, widget_pairs = _group_recovered(root, recovered)

    md = Metadata(
        name=_child_text(root, "name"),
        author=_child_text(root, "author"),
        copyright=_child_text(root, "copyright"),
        license=_child_text(root, "license"),
        version=_child_text(root, "version"),
        classname=_child_text(root, "classname"),
        inputs=_parse_count(root, "inputs"),
        outputs=_parse_count(root, "outputs"),
    )

    md.metadata.extend(_meta_pairs(root))
    md.metadata.extend(global_pairs)

    for index, node in enumerate(root.findall(ACTIVE_GROUP_PATH)):
        md.active.append(extract_widget(node, True, widget_pairs.get((True, index), ())))
    for index, node in enumerate(root.findall(PASSIVE_GROUP_PATH)):
        md.passive.append(extract_widget(node, False, widget_pairs.get((False, index), ())))

    return md
