#!/usr/bin/env python3
"""
Command line entry point: print the effective configuration of a user file.
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QCoreApplication

from .config.defaults import DEFAULT_SETTINGS
from .core.store import ConfigStore
from .model.errors import ConfigError
from .model.values import EMPTY
from .utils.json_io import parse_mapping_file, serialize


def setup_logging(log_level: str = None, log_file_path: str = None) -> None:
    """Setup logging with settings from defaults.py."""
    logging_config = DEFAULT_SETTINGS.get('logging', {})

    if log_level is None:
        log_level = logging_config.get('level', 'INFO')
    if log_file_path is None:
        log_file_path = logging_config.get('file_path', 'jsonconfig.log')

    file_enabled = logging_config.get('file_enabled', False)
    console_enabled = logging_config.get('console_enabled', True)

    handlers = []
    if console_enabled:
        handlers.append(logging.StreamHandler(sys.stderr))
    if file_enabled:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_path)))

    # Fallback to console if no handlers enabled
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=logging_config.get('format'),
        handlers=handlers,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonconfig",
        description="Merge a user configuration file over a default one and print the result.",
    )
    parser.add_argument("user_file", help="User configuration file (JSON, '#' comment lines allowed)")
    parser.add_argument("--default", dest="default_file", help="Default configuration file")
    parser.add_argument("--get", dest="key", help="Print only the value at this dotted path")
    parser.add_argument("--watch", action="store_true", help="Keep running and print on every change")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser


def render(store: ConfigStore, key: Optional[str]) -> str:
    """Effective tree, or the value at ``key``, as JSON text."""
    effective = store.get_effective()
    node = effective.lookup(key) if key else effective
    if node is EMPTY:
        return "null"
    return serialize(node)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        default_tree = parse_mapping_file(args.default_file, is_default=True) if args.default_file else None
        store = ConfigStore(default_tree, name=Path(args.user_file).stem)
        store.load_and_watch(args.user_file)
    except ConfigError as e:
        logger.error(f"Failed to load configuration: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(render(store, args.key))
    if not args.watch:
        store.close()
        return 0

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    # Let Ctrl+C terminate the event loop
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    def on_change():
        print(render(store, args.key), flush=True)

    store.subscribe(on_change)
    logger.info(f"Watching {store.backing_file} for changes")
    try:
        return app.exec()
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
