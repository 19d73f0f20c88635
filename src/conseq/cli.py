"""Command line tool for Conseq text.

Usage:
    conseq demo -f readable                          # render and re-read a sample record
    conseq reformat settings.txt -t app.config:Settings -f compact
    conseq reformat items.txt -t app.models:Item --list -o items.readable.txt
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

from conseq.api import dumps, loads
from conseq.demo import Example, build_example
from conseq.errors import ConseqError
from conseq.logging_config import level_from_verbosity, setup_logging
from conseq.types import ConseqFormat

logger = logging.getLogger(__name__)

FORMAT_CHOICES = [fmt.value for fmt in ConseqFormat]


def import_record_type(spec: str) -> type:
    """Import a class given as ``module:QualifiedName``."""
    module_name, sep, qualname = spec.partition(":")
    if not sep or not module_name or not qualname:
        raise ValueError(f"Expected 'module:Class', got {spec!r}")
    obj: object = importlib.import_module(module_name)
    for part in qualname.split("."):
        if not hasattr(obj, part):
            raise ValueError(f"{spec!r} not found: no attribute {part!r}")
        obj = getattr(obj, part)
    if not isinstance(obj, type):
        raise ValueError(f"{spec!r} is not a class")
    return obj


def run_demo(fmt: ConseqFormat) -> int:
    """Render the sample record, read it back and compare."""
    example = build_example()
    text = dumps(example, fmt)
    print(text)

    restored = loads(text, Example)
    if restored != example:
        print("Round-trip test FAILED", file=sys.stderr)
        return 1
    print("Round-trip test PASSED")
    return 0


def run_reformat(
    path: Path,
    type_spec: str,
    fmt: ConseqFormat,
    as_list: bool = False,
    output: Path | None = None,
) -> int:
    """Read a Conseq file as the given record type and write it in another layout."""
    record_type = import_record_type(type_spec)
    target = list[record_type] if as_list else record_type  # type: ignore[valid-type]

    text = path.read_text(encoding="utf-8")
    value = loads(text, target)
    if as_list:
        logger.info("Read %d records from %s", len(value), path)
    result = dumps(value, fmt)

    if output:
        output.write_text(result + "\n", encoding="utf-8")
        print(f"Wrote {output}", file=sys.stderr)
    else:
        print(result)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="conseq",
        description="Read and write Conseq key/value text",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug, -vvv trace)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    demo_parser = subparsers.add_parser("demo", help="Render a sample record and read it back")
    demo_parser.add_argument(
        "-f", "--format",
        choices=FORMAT_CHOICES,
        default=ConseqFormat.READABLE.value,
        help="Layout to render (default: readable)",
    )

    reformat_parser = subparsers.add_parser("reformat", help="Re-render a Conseq file in another layout")
    reformat_parser.add_argument("file", type=Path, help="Conseq file to read")
    reformat_parser.add_argument(
        "-t", "--type",
        required=True,
        dest="type_spec",
        help="Record class as module:Class",
    )
    reformat_parser.add_argument(
        "--list",
        action="store_true",
        help="Read blank-line separated records instead of a single record",
    )
    reformat_parser.add_argument(
        "-f", "--format",
        choices=FORMAT_CHOICES,
        default=ConseqFormat.READABLE.value,
        help="Layout to write (default: readable)",
    )
    reformat_parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout)",
    )

    args = parser.parse_args(argv)
    setup_logging(level_from_verbosity(args.verbose) if args.verbose else None)
    fmt = ConseqFormat(args.format)

    try:
        if args.command == "demo":
            return run_demo(fmt)
        return run_reformat(args.file, args.type_spec, fmt, args.list, args.output)
    except (ConseqError, OSError, ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
