"""Command-line interface for XLIFF Envelope.

WHY: The packaging step runs from shell scripts and job runners after
extraction. A single command that takes a pack folder and prints the
path of the enveloped XLIFF is enough to wire it in; the reverse command
lets operators recover a pack from a translated file by hand.

HOW: argparse with two subcommands:
  build PACK_FOLDER [--original-format FMT]
  extract XLF OUTPUT_FOLDER
Status messages go to stderr, the resulting path goes to stdout so the
command can be used in pipelines. Every EnvelopeError becomes a one-line
error message and exit status 1.

RULES:
- stdout carries only the result path
- -v/--verbose turns on DEBUG logging for the library modules
- Exit 0 on success, 1 on any EnvelopeError, 2 on usage errors (argparse)
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from xliff_envelope import __version__
from xliff_envelope.config import configure_logging
from xliff_envelope.core.builder import build
from xliff_envelope.core.errors import EnvelopeError
from xliff_envelope.core.extractor import unpack
from xliff_envelope.core.formats import Format
from xliff_envelope.core.package import ConversionPackage


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _run_build(args: argparse.Namespace) -> None:
    """Discover the pack, build the enveloped XLIFF, print its path."""
    try:
        package = ConversionPackage.from_folder(args.pack_folder)
        _status("Pack: {}".format(package.pack_folder))
        _status("  Original: {}".format(package.original_file.name))
        _status("  XLIFF: {}".format(package.xlf.name))
        if args.original_format:
            _status("  Original format: {}".format(args.original_format))

        output = build(package, args.original_format)
    except EnvelopeError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    _status("Done! Saved {}".format(output.name))
    print(output)


def _run_extract(args: argparse.Namespace) -> None:
    """Unpack an enveloped XLIFF into a pack folder, print the folder."""
    try:
        package = unpack(Path(args.xlf), Path(args.output_folder))
    except EnvelopeError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    _status("  Original: {}".format(package.original_file.name))
    _status("  Manifest: {}".format(package.manifest.name))
    _status("  XLIFF: {}".format(package.xlf.name))
    print(package.pack_folder)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() lets tests inspect
    the parser without touching the filesystem.

    RULES:
    - Subcommand is required
    - --original-format choices are the Format identifiers
    """
    parser = argparse.ArgumentParser(
        prog="xliff-envelope",
        description="Embed the original document and extraction manifest into "
                    "an XLIFF, or recover them from one.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    build_cmd = subparsers.add_parser(
        "build",
        help="Build an enveloped XLIFF from a pack folder.",
    )
    build_cmd.add_argument(
        "pack_folder",
        help="Pack folder containing manifest.rkm, original/ and work/.",
    )
    build_cmd.add_argument(
        "--original-format",
        default=None,
        choices=sorted(f.value for f in Format),
        metavar="FORMAT",
        help="Format of the document before any upstream conversion "
             "(e.g. 'doc' when a .doc was converted to .docx).",
    )
    build_cmd.set_defaults(handler=_run_build)

    extract_cmd = subparsers.add_parser(
        "extract",
        help="Recreate a pack folder from an enveloped XLIFF.",
    )
    extract_cmd.add_argument("xlf", help="Enveloped XLIFF file.")
    extract_cmd.add_argument("output_folder", help="New or empty folder to unpack into.")
    extract_cmd.set_defaults(handler=_run_extract)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m xliff_envelope`` and ``xliff-envelope``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    args.handler(args)


if __name__ == "__main__":
    main()
