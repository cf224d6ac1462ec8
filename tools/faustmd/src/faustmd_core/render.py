from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .common import c_string_literal, mangle_identifier
from .model import Metadata, Widget


@dataclass(frozen=True)
class HeaderRenderOptions:
    # Append _2, _3, ... to repeated accessor names instead of emitting
    # one accessor per widget verbatim.
    unique_accessors: bool = False


def format_number(value: float) -> str:
    return f"{value:g}"


def offset_expression(var: str) -> str:
    return f"(size_t)&((FAUSTCLASS *)0)->{var}"


def _join(items: Iterable[str]) -> str:
    return ", ".join(items)


def _metadata_entries(pairs: Iterable[tuple[str, str]]) -> str:
    return _join(f"{{{c_string_literal(key)}, {c_string_literal(value)}}}" for key, value in pairs)


def accessor_names(widgets: list[Widget], prefix: str, unique: bool) -> list[str]:
    names: list[str] = []
    seen: dict[str, int] = {}
    for widget in widgets:
        name = mangle_identifier(prefix + widget.label)
        if unique:
            count = seen.get(name, 0) + 1
            seen[name] = count
            if count > 1:
                name = f"{name}_{count}"
        names.append(name)
    return names


def render_widgets(widgets: list[Widget], is_active: bool, options: HeaderRenderOptions) -> list[str]:
    prefix = "active" if is_active else "passive"
    lines: list[str] = []

    def table(decl: str, name: str, value: Callable[[Widget], str]) -> None:
        lines.append(f"\tFMSTATIC {decl} {prefix}_{name}[] = {{{_join(value(w) for w in widgets)}}};")

    table(f"constexpr {prefix}_type_t", "type", lambda w: f"{prefix}_type_t::{w.type.value}")
    table("constexpr int", "id", lambda w: str(w.id))
    table("const char *const", "label", lambda w: c_string_literal(w.label))
    table("const char *const", "symbol", lambda w: c_string_literal(mangle_identifier(w.label)))
    table("const std::size_t", "offsets", lambda w: offset_expression(w.var))
    table("constexpr FAUSTFLOAT", "init", lambda w: format_number(w.init))
    table("constexpr FAUSTFLOAT", "min", lambda w: format_number(w.min))
    table("constexpr FAUSTFLOAT", "max", lambda w: format_number(w.max))
    table("constexpr FAUSTFLOAT", "step", lambda w: format_number(w.step))
    lines.append("")

    table("const char *const", "unit", lambda w: c_string_literal(w.unit))
    table("constexpr scale_t", "scale", lambda w: f"scale_t::{w.scale.value}")
    table("const char *const", "tooltip", lambda w: c_string_literal(w.tooltip))
    lines.append("")

    table("const metadata_t *const", "metadata", lambda w: f"(metadata_t[]){{{_metadata_entries(w.metadata)}}}")
    table("constexpr std::size_t", "metadata_size", lambda w: str(len(w.metadata)))
    lines.append("")

    if is_active:
        lines.append(
            f"\tFMSTATIC inline void {prefix}_set(FAUSTCLASS &x, unsigned idx, FAUSTFLOAT v) {{"
            f" *(FAUSTFLOAT *)((char *)&x + {prefix}_offsets[idx]) = v; }}"
        )
    lines.append(
        f"\tFMSTATIC inline FAUSTFLOAT {prefix}_get(const FAUSTCLASS &x, unsigned idx) {{"
        f" return *(const FAUSTFLOAT *)((const char *)&x + {prefix}_offsets[idx]); }}"
    )
    lines.append("")

    if is_active:
        for widget, name in zip(widgets, accessor_names(widgets, "set_", options.unique_accessors)):
            lines.append(f"\tFMSTATIC inline void {name}(FAUSTCLASS &x, FAUSTFLOAT v) {{ x.{widget.var} = v; }}")
    for widget, name in zip(widgets, accessor_names(widgets, "get_", options.unique_accessors)):
        lines.append(f"\tFMSTATIC inline FAUSTFLOAT {name}(const FAUSTCLASS &x) {{ return x.{widget.var}; }}")

    return lines


def render_header(md: Metadata, options: HeaderRenderOptions | None = None) -> str:
    opts = options or HeaderRenderOptions()
    ident_meta = mangle_identifier(md.classname) + "_meta"
    guard = f"__{ident_meta}_H__"

    lines: list[str] = []
    lines.append(f"#ifndef {guard}")
    lines.append(f"#define {guard}")
    lines.append("")
    lines.append("#include <cstddef>")
    lines.append("")
    lines.append("#ifndef FAUSTMETA")
    lines.append(f"#define FAUSTMETA {ident_meta}")
    lines.append("#endif")
    lines.append("")
    lines.append("#ifdef __GNUC__")
    lines.append("#define FMSTATIC __attribute__((unused)) static")
    lines.append("#else")
    lines.append("#define FMSTATIC static")
    lines.append("#endif")
    lines.append("")
    lines.append(f"namespace {ident_meta} {{")
    lines.append("\tstruct metadata_t { const char *key; const char *value; };")
    lines.append("\tenum class active_type_t { button, checkbox, vslider, hslider, nentry };")
    lines.append("\tenum class passive_type_t { vbargraph, hbargraph };")
    lines.append("\tenum class scale_t { linear, log, exp };")
    lines.append("")

    for field_name in ("name", "author", "copyright", "license", "version", "classname"):
        lines.append(f"\tFMSTATIC constexpr char {field_name}[] = {c_string_literal(getattr(md, field_name))};")
    lines.append(f"\tFMSTATIC constexpr unsigned inputs = {md.inputs};")
    lines.append(f"\tFMSTATIC constexpr unsigned outputs = {md.outputs};")
    lines.append(f"\tFMSTATIC constexpr unsigned actives = {len(md.active)};")
    lines.append(f"\tFMSTATIC constexpr unsigned passives = {len(md.passive)};")
    lines.append("")

    lines.append(f"\tFMSTATIC const metadata_t metadata[] = {{{_metadata_entries(md.metadata)}}};")
    lines.append("")

    lines.extend(render_widgets(md.active, True, opts))
    lines.append("")
    lines.extend(render_widgets(md.passive, False, opts))

    lines.append("}")
    lines.append("")
    lines.append("#undef FMSTATIC")
    lines.append(f"#endif // {guard}")
    return "\n".join(lines) + "\n"
