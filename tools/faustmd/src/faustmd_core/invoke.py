from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .common import CompilerError

_logger = logging.getLogger(__name__)

COMPILER_ENV_VAR = "FAUST"
DEFAULT_COMPILER = "faust"


def resolve_compiler_executable(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    value = env.get(COMPILER_ENV_VAR, "").strip()
    return value or DEFAULT_COMPILER


@dataclass(frozen=True)
class CompilerConfig:
    executable: str = DEFAULT_COMPILER
    include_dirs: tuple[str, ...] = ()
    class_name: str | None = None
    process_name: str | None = None
    extra_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompilerOutputs:
    report_path: Path
    source_path: Path


def output_names(source_file: Path) -> tuple[str, str]:
    base = source_file.name
    return f"{base}.xml", f"{base}.cpp"


def build_compiler_command(source_file: Path, workdir: Path, config: CompilerConfig) -> list[str]:
    _, cpp_name = output_names(source_file)
    command = [
        config.executable,
        "-double",
        "-xml",
        "-O",
        str(workdir),
        "-o",
        cpp_name,
    ]
    for include_dir in config.include_dirs:
        command.extend(["-I", include_dir])
    if config.class_name:
        command.extend(["-cn", config.class_name])
    if config.process_name:
        command.extend(["-pn", config.process_name])
    command.extend(config.extra_args)
    command.append(str(source_file))
    return command


def format_command(command: list[str]) -> str:
    return " ".join(shlex.quote(item) for item in command)


def run_compiler(source_file: Path, workdir: Path, config: CompilerConfig) -> CompilerOutputs:
    xml_name, cpp_name = output_names(source_file)
    outputs = CompilerOutputs(report_path=workdir / xml_name, source_path=workdir / cpp_name)

    command = build_compiler_command(source_file, workdir, config)
    rendered = format_command(command)
    _logger.debug("running %s", rendered)

    try:
        proc = subprocess.run(command, capture_output=True, text=True, errors="replace")
    except OSError as exc:
        raise CompilerError(f"Unable to launch compiler. command={rendered}; error={exc}") from exc

    if proc.returncode < 0:
        try:
            signame = signal.Signals(-proc.returncode).name
        except ValueError:
            signame = str(-proc.returncode)
        raise CompilerError(f"Compiler terminated by signal {signame}. command={rendered}")
    if proc.returncode != 0:
        message = (proc.stderr or "").strip() or (proc.stdout or "").strip() or "unknown compiler error"
        raise CompilerError(
            f"Compiler exited with status {proc.returncode}. command={rendered}; error={message}"
        )

    stderr = (proc.stderr or "").strip()
    if stderr:
        _logger.debug("compiler stderr: %s", stderr)
    return outputs
