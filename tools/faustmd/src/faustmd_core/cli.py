from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .common import FaustMdError, write_if_changed
from .invoke import CompilerConfig, resolve_compiler_executable
from .pipeline import generate_header
from .render import HeaderRenderOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faustmd",
        allow_abbrev=False,
        description="Compile a Faust DSP file and emit a C++ header describing its metadata and widgets.",
    )
    parser.add_argument("dsp_file", help="Faust source file (.dsp).")
    parser.add_argument(
        "-I",
        dest="include_dirs",
        action="append",
        default=[],
        metavar="DIR",
        help="Add a directory to the Faust import path (repeatable; use -I=DIR for a directory starting with -).",
    )
    parser.add_argument("-cn", dest="class_name", metavar="NAME", help="Name of the generated DSP class.")
    parser.add_argument("-pn", dest="process_name", metavar="NAME", help="Name of the top-level process function.")
    parser.add_argument(
        "--faust-arg",
        dest="extra_args",
        action="append",
        default=[],
        metavar="ARG",
        help="Pass an extra argument to the Faust compiler (repeatable; use --faust-arg=-flag for dashed values).",
    )
    parser.add_argument("-o", "--output", help="Write the header to path instead of standard output.")
    parser.add_argument(
        "--check",
        action="store_true",
        help="With --output, fail and print a diff instead of writing when the file is out of date.",
    )
    parser.add_argument(
        "--unique-accessors",
        action="store_true",
        help="Disambiguate accessor functions of widgets that share a label.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to standard error.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.check and not args.output:
        parser.error("--check requires --output")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="faustmd: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    config = CompilerConfig(
        executable=resolve_compiler_executable(),
        include_dirs=tuple(args.include_dirs),
        class_name=args.class_name,
        process_name=args.process_name,
        extra_args=tuple(args.extra_args),
    )
    options = HeaderRenderOptions(unique_accessors=args.unique_accessors)

    try:
        header = generate_header(Path(args.dsp_file), config, options)
        if args.output:
            return write_if_changed(Path(args.output), header, args.check)
    except FaustMdError as exc:
        print(f"faustmd error: {exc}", file=sys.stderr)
        return 2

    sys.stdout.write(header)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
