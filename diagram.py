import argparse
import os
import sys

from typegraph.builder import DiagramBuilder
from typegraph.config import RunConfig
from typegraph.emitters import emitter_registry
from typegraph.extractors import extractor_registry
from typegraph.log import configure_logging


def cmd_generate(args: argparse.Namespace) -> int:
    """Extract a class diagram from a source tree.

    The output format is selected via the global ``--format`` option;
    the languages scanned via repeated ``--language`` options.  Files
    that cannot be scanned are reported on stderr and skipped.
    """
    if not getattr(args, "source", None):
        sys.exit("Error: No source directory provided. Usage: diagram.py generate SRC")

    if not os.path.isdir(args.source):
        sys.exit(f"Error: Source directory not found: {args.source}")

    config = RunConfig.from_args(args)
    configure_logging(config.debug)

    builder = DiagramBuilder(languages=config.languages, ignore_dirs=config.ignore_dirs)
    builder.load_tree(str(config.source_root))
    text = builder.emit(config.output_format)

    if config.output is None:
        sys.stdout.write(text)
    else:
        try:
            with open(config.output, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            sys.exit(f"Error: Cannot write {config.output}: {exc.strerror}")

    if builder.failures:
        print(f"{len(builder.failures)} file(s) skipped, see log above.", file=sys.stderr)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diagram.py",
        description="Class diagrams from C#, TypeScript, Python and Java sources.",
    )

    # Global options
    parser.add_argument(
        "--format",
        choices=emitter_registry.keys(),
        default="plantuml",
        help="Output format (default: plantuml).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Trace every declaration, member and edge on stderr.",
    )

    subparsers = parser.add_subparsers(dest="command")

    # generate subcommand
    generate = subparsers.add_parser(
        "generate",
        help="Scan a source tree and write its class diagram.",
    )
    generate.add_argument(
        "source",
        metavar="SRC",
        help="Root directory of the sources to scan.",
    )
    generate.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Write the diagram to FILE instead of stdout.",
    )
    generate.add_argument(
        "--exclude",
        metavar="DIR",
        action="append",
        default=[],
        help="Directory name to skip (repeatable).",
    )
    generate.add_argument(
        "--language",
        choices=extractor_registry.keys(),
        action="append",
        help="Only scan this language (repeatable; default: all).",
    )
    generate.set_defaults(func=cmd_generate)

    return parser


def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
