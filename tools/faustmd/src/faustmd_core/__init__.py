from .common import (
    CompilerError,
    ExtractionError,
    FaustMdError,
    OutputError,
    ReportError,
    ScrapeError,
    WorkspaceError,
    c_string_literal,
    escape_c_string,
    mangle_identifier,
    unescape_c_string,
    write_if_changed,
)
from .extract import extract_metadata, load_report
from .invoke import CompilerConfig, CompilerOutputs, build_compiler_command, resolve_compiler_executable, run_compiler
from .model import Metadata, Scale, Widget, WidgetType
from .pipeline import compile_metadata, generate_header
from .render import HeaderRenderOptions, render_header
from .scrape import RecoveredRecord, has_explicit_metadata, scrape_lines, scrape_source
from .workspace import ScratchWorkspace, make_scratch_dir

__all__ = [
    "CompilerConfig",
    "CompilerError",
    "CompilerOutputs",
    "ExtractionError",
    "FaustMdError",
    "HeaderRenderOptions",
    "Metadata",
    "OutputError",
    "RecoveredRecord",
    "ReportError",
    "Scale",
    "ScrapeError",
    "ScratchWorkspace",
    "Widget",
    "WidgetType",
    "WorkspaceError",
    "build_compiler_command",
    "c_string_literal",
    "compile_metadata",
    "escape_c_string",
    "extract_metadata",
    "generate_header",
    "has_explicit_metadata",
    "load_report",
    "make_scratch_dir",
    "mangle_identifier",
    "render_header",
    "resolve_compiler_executable",
    "run_compiler",
    "scrape_lines",
    "scrape_source",
    "unescape_c_string",
    "write_if_changed",
]
