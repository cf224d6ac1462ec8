from __future__ import annotations

import logging
from pathlib import Path

from .extract import extract_metadata, load_report
from .invoke import CompilerConfig, output_names, run_compiler
from .model import Metadata
from .render import HeaderRenderOptions, render_header
from .scrape import RecoveredRecord, has_explicit_metadata, scrape_source
from .workspace import ScratchWorkspace

_logger = logging.getLogger(__name__)


def compile_metadata(
    source_file: Path,
    config: CompilerConfig,
    workspace: ScratchWorkspace | None = None,
) -> Metadata:
    with workspace or ScratchWorkspace() as ws:
        xml_name, cpp_name = output_names(source_file)
        ws.track(ws.path / xml_name)
        ws.track(ws.path / cpp_name)

        outputs = run_compiler(source_file, ws.path, config)
        root = load_report(outputs.report_path)

        recovered: list[RecoveredRecord] = []
        if not has_explicit_metadata(root):
            _logger.debug("report has no <meta> entries, scanning %s", outputs.source_path)
            recovered = scrape_source(outputs.source_path)

        return extract_metadata(root, recovered)


def generate_header(
    source_file: Path,
    config: CompilerConfig,
    options: HeaderRenderOptions | None = None,
    workspace: ScratchWorkspace | None = None,
) -> str:
    md = compile_metadata(source_file, config, workspace)
    return render_header(md, options)
