"""
Main entry point for the wow-addon-updater application.
Turns application errors escaping the CLI into a readable error panel.
"""

import logging
import os
import sys

from rich.console import Console

from wow_addon_updater.cli.app import app
from wow_addon_updater.cli.formatters import format_error_with_suggestions
from wow_addon_updater.exceptions import AddonUpdaterError

log = logging.getLogger("wow_addon_updater")


def _use_utf8_console() -> None:
    """The summary panels contain symbols the legacy Windows code pages lack."""
    if os.name != "nt":
        return
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass


def main() -> None:
    """Main entry point function."""
    _use_utf8_console()
    console = Console(stderr=True)

    try:
        app(prog_name="wow-addon-updater")
    except AddonUpdaterError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
