"""Main CLI entry point for the OpenAPI reference flattener."""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from src.cli.commands.flatten import flatten_command
from src.cli.config import Config
from src.utils.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-flatten",
        description="Flatten external $ref pointers of an OpenAPI document into its components",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    flatten_parser = subparsers.add_parser(
        "flatten", help="Copy externally referenced definitions into the document and rewrite the pointers"
    )
    flatten_parser.add_argument("source", help="Path or URL of the root OpenAPI document")
    flatten_parser.add_argument("-o", "--output", help="Write the flattened document here (default: stdout)")
    flatten_parser.add_argument(
        "--format",
        dest="output_format",
        choices=["yaml", "json"],
        default=None,
        help="Output format (default: FLATTEN_OUTPUT_FORMAT or yaml)",
    )
    flatten_parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Exit with status 2 if any reference stays unresolved",
    )
    flatten_parser.add_argument("--config", help="Path to .env configuration file", default=None)
    flatten_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show every resolved reference",
    )
    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(verbose=getattr(args, "verbose", False))

    # Load configuration
    config = Config(args.config)

    if args.command == "flatten":
        return flatten_command(
            config=config,
            source=args.source,
            output=args.output,
            output_format=args.output_format,
            strict=args.strict,
        )

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
