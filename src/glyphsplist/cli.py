"""glyphsplist CLI: format, validate and inspect plist / Glyphs files."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def main():
    """Main CLI entry point for glyphsplist commands."""
    # Get version for --version argument (handle PackageNotFoundError)
    try:
        glyphsplist_version = get_version("glyphsplist")
    except PackageNotFoundError:
        glyphsplist_version = "dev"

    parser = argparse.ArgumentParser(
        prog="glyphsplist",
        description="glyphsplist: OpenStep plist codec and Glyphs 3 font model"
    )
    parser.add_argument("--version", action="version", version=f"glyphsplist {glyphsplist_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages to stderr."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # fmt command
    fmt_parser = subparsers.add_parser(
        "fmt",
        help="Rewrite a plist file in canonical form",
        parents=[parent_parser]
    )
    fmt_parser.add_argument(
        "path",
        type=Path,
        help="Path to a plist or .glyphs file"
    )
    fmt_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the canonical text here instead of stdout"
    )
    fmt_parser.add_argument(
        "--check",
        action="store_true",
        help="Write nothing; exit 1 if the file is not already canonical"
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Load a file as a Glyphs 3 font and report problems",
        parents=[parent_parser]
    )
    validate_parser.add_argument(
        "path",
        type=Path,
        help="Path to a .glyphs file"
    )
    validate_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for validate.json (no report file when omitted)"
    )

    # to-json command
    to_json_parser = subparsers.add_parser(
        "to-json",
        help="Print the plist tree as canonical JSON",
        parents=[parent_parser]
    )
    to_json_parser.add_argument(
        "path",
        type=Path,
        help="Path to a plist or .glyphs file"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    if args.command == "fmt":
        # Lazy import: only import the kernel when a command runs
        from .kernel.plist import dumps, parse

        try:
            text = _read_text(args.path)
            canonical = dumps(parse(text)) + "\n"
            if args.check:
                if text != canonical:
                    if not args.quiet:
                        print(f"[FAIL] {args.path} is not canonical")
                    sys.exit(1)
                if not args.quiet:
                    print(f"[OK] {args.path} is canonical")
            elif args.output is not None:
                args.output.write_text(canonical, encoding="utf-8")
                if not args.quiet:
                    print(f"[OK] Wrote {args.output}")
            else:
                sys.stdout.write(canonical)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "validate":
        from .api import validate_font
        from ._internal.canonical_json import canonical_dumps

        try:
            report = validate_font(args.path)
            if args.output_dir is not None:
                args.output_dir.mkdir(parents=True, exist_ok=True)
                report_out = args.output_dir / "validate.json"
                report_out.write_text(canonical_dumps(report.model_dump()) + "\n", encoding="utf-8")
                if not args.quiet:
                    print(f"  Report: {report_out}")
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        if not args.quiet:
            status = "OK" if report.ok else "FAILED"
            print(f"[{status}] Validation complete")
            print(f"  Status: {status}")
            print(f"  Errors: {len(report.issues)}")
            if report.ok:
                print(f"  Glyphs: {report.glyph_count}")
                print(f"  Masters: {report.master_count}")
        for issue in report.issues:
            location = f" ({issue.location})" if issue.location else ""
            print(f"  {issue.code}{location}: {issue.message}", file=sys.stderr)
        if not report.ok:
            sys.exit(1)
    elif args.command == "to-json":
        from .kernel.plist import parse
        from ._internal.canonical_json import canonical_dumps

        try:
            print(canonical_dumps(parse(_read_text(args.path))))
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
