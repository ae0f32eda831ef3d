"""Command line entry point for the DataManager.

    python datamanager.py --print-template > data/config/datamanager.yml
    python datamanager.py --setup
    python datamanager.py --serve --port 8000
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import Iterable, Optional

from datamanager_lib.config.config import CONFIG_PATH, default_template, load_config


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Scoped plugin data storage")
    p.add_argument("--config", type=Path, default=CONFIG_PATH, help="Path to the YAML configuration file")
    p.add_argument("--print-template", action="store_true", help="Print the default YAML configuration to stdout and exit")
    p.add_argument("--setup", action="store_true", help="Create all tables on the configured backend and exit")
    p.add_argument("--serve", action="store_true", help="Run the HTTP API")
    p.add_argument("--host", default="127.0.0.1", help="Address to bind when serving")
    p.add_argument("--port", type=int, default=8000, help="Port to bind when serving")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    if argv is not None:
        argv = list(argv)
    return get_parser().parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)

    if args.print_template:
        sys.stdout.write(default_template())
        return 0

    try:
        config = load_config(args.config)
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        print(f"Invalid configuration in {args.config}: {e}", file=sys.stderr)
        return 2

    if args.setup:
        from datamanager_lib.bootstrap import bootstrap_data_manager
        from datamanager_lib.logging_config import configure_logging

        configure_logging(args.config, log_level=config.log_level)
        manager = bootstrap_data_manager(config)
        manager.storage.close()
        print(f"Created DataManager tables on the {config.backend} backend")
        return 0

    if args.serve:
        import uvicorn
        from datamanager_lib.main import create_app

        app = create_app(config, config_path=args.config)
        uvicorn.run(app, host=args.host, port=args.port)
        return 0

    get_parser().print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
