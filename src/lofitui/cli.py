"""Command line entry point for LofiTUI."""
from __future__ import annotations

import argparse
import sys
from typing import Iterable

from . import __build_date__, __commit__, __version__
from .app import LofiApp
from .config import config_path, load_or_default_config
from .logging_utils import configure_logging, get_logger

log = get_logger(__name__)


def version_text() -> str:
    return f"lofitui {__version__}\ncommit: {__commit__}\nbuilt: {__build_date__}"


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lofitui",
        description="Pick a lofi stream and play it in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=version_text(),
        help="Print version information and exit",
    )
    return parser.parse_args(None if argv is None else list(argv))


def main(argv: Iterable[str] | None = None) -> None:
    parse_args(argv)
    configure_logging()
    path = config_path()
    log.info("CLI invoked with config=%s", path)
    configuration = load_or_default_config(path)
    app = LofiApp(configuration, config_path=path)
    log.info("Launching Textual application")
    try:
        app.run()
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received; exiting application")
        if app.is_running:
            app.exit()
        raise SystemExit(130) from None
    except Exception as exc:
        log.exception("Application terminated with an error")
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    if app.return_code:
        raise SystemExit(app.return_code)


if __name__ == "__main__":  # pragma: no cover
    main()
