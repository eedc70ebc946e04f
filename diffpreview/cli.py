#!/usr/bin/env python3
"""diffpreview CLI entrypoint."""

import argparse
import logging
import sys
import traceback
from dataclasses import replace
from pathlib import Path

from diffpreview.errors import PreviewError
from diffpreview.lib.config import load_config
from diffpreview.lib.constants import VALID_LAYOUTS
from diffpreview.preview import run_preview


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='diffpreview',
        description='Preview uncommitted git changes in a directory diff viewer',
        epilog=(
            'The default viewer is WinMerge (both sides read-only) on Windows and Meld '
            'elsewhere. Meld cannot open the sides read-only, so edits made there change '
            'only the snapshot copies, never the repository. Set "viewer" in the config '
            'file to use another tool.'
        ),
    )
    parser.add_argument('--include-untracked', '-u', action='store_true',
                        help='Also show untracked files (as additions)')
    parser.add_argument('--layout', choices=VALID_LAYOUTS,
                        help='flat: files by name only; mirror: keep repo-relative paths')
    parser.add_argument('--no-viewer', action='store_true',
                        help='Build the snapshot and print its location without launching the viewer')
    parser.add_argument('--config', '-c', type=Path,
                        help='Config file (default: ~/.config/diffpreview/config.yaml)')
    parser.add_argument('--verbose', '-v', action='count', default=0,
                        help='Log progress (-v) or every command run (-vv)')
    return parser


def setup_logging(verbosity: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args.config)
        overrides = {}
        if args.include_untracked:
            overrides["include_untracked"] = True
        if args.layout:
            overrides["layout"] = args.layout
        config = replace(config, **overrides)

        run_preview(config, launch=not args.no_viewer)
    except PreviewError as e:
        print(f"ERROR: {e}")
        traceback.print_exc(file=sys.stdout)
        return e.exit_code

    return 0


if __name__ == '__main__':
    sys.exit(main())
