"""Command-line entry point."""

import argparse
import sys
from typing import Optional

from .app.application import AppConfig, Application, SessionOutcome
from .core.errors import ExportError, TerminalError
from .core.renderer import RendererConfig


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jute",
        description="Create JSON key-value pairs in your terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jute                        # Print the JSON to stdout
  jute > pairs.json           # The editor draws on stderr, so stdout can be redirected
  jute -o pairs.json          # Write the file atomically
  jute --typed --indent 2     # Emit numbers, booleans and null as JSON literals
        """
    )

    parser.add_argument(
        "-o", "--output",
        metavar="PATH",
        help="Write the JSON to PATH instead of stdout ('-' means stdout)"
    )
    parser.add_argument(
        "--typed",
        action="store_true",
        help="Emit values that look like JSON numbers, true, false or null as those types"
    )
    parser.add_argument(
        "--allow-empty",
        action="store_true",
        help="Allow saving with no pairs (outputs {})"
    )
    parser.add_argument(
        "--indent",
        type=int,
        metavar="N",
        help="Pretty-print with N spaces of indentation"
    )
    parser.add_argument(
        "--key-config",
        metavar="PATH",
        help="YAML key-binding file to use instead of the bundled one"
    )
    parser.add_argument(
        "--key-scheme",
        metavar="NAME",
        help="Key scheme from the key-binding file (e.g. 'vim')"
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Save the session log to PATH on exit"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Include debug messages in the session log"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        output=args.output,
        typed=args.typed,
        allow_empty=args.allow_empty,
        indent=args.indent,
        key_config_path=args.key_config,
        key_scheme=args.key_scheme,
        log_file=args.log_file,
        debug=args.debug,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    from .renderers.terminal_renderer import TerminalRenderer

    renderer = TerminalRenderer(RendererConfig())
    app = Application(renderer, config_from_args(args))

    try:
        outcome = app.run()
    except KeyboardInterrupt:
        print("Interrupted, nothing exported", file=sys.stderr)
        return EXIT_INTERRUPTED
    except (ExportError, TerminalError) as e:
        print(f"jute: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if outcome == SessionOutcome.EXPORTED and app.config.output not in (None, "-"):
        print(f"Saved {len(app.controller.collection)} pairs to {app.config.output}",
              file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
