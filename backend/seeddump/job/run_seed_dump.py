from __future__ import annotations

"""Seed dump entry point.

Reads options from the environment (see `seeddump.core.config`), imports the
application's declarative base so every model is mapped, then writes seed
data for all selected models in dependency order.

Run:
  SEED_DUMP_BASE=myapp.models:Base DATABASE_URL=... seed-dump
  python backend/seeddump/job/run_seed_dump.py --base myapp.models:Base --print-order
"""

import argparse
import importlib
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

# Ensure backend/ is importable as top-level `seeddump` when run as a script.
BASE_DIR = Path(__file__).resolve().parents[2]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from seeddump.core.db import make_session_factory  # noqa: E402
from seeddump.core.env import load_env_if_present  # noqa: E402
from seeddump.core.errors import ConfigError, SeedDumpError  # noqa: E402
from seeddump.environment import dump_using_environment, ordered_models_from_env  # noqa: E402
from seeddump.export.writer import dump  # noqa: E402
from seeddump.metadata.introspect import registry_from_declarative  # noqa: E402
from seeddump.metadata.registry import ModelDescriptor  # noqa: E402


BASE_ENV = "SEED_DUMP_BASE"

logger = logging.getLogger("seeddump.job")
logger.setLevel(logging.INFO)


def _log(event: dict) -> None:
    logger.info(json.dumps(event, ensure_ascii=False))


def load_base(target: str) -> Any:
    """Import `module:attribute` and return the attribute (the declarative base)."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ConfigError(f"{BASE_ENV} must look like 'package.module:Base' (got {target!r}).")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import {module_name!r}: {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ConfigError(f"{module_name!r} has no attribute {attr!r}.") from e


def _dump_and_log(session, model: ModelDescriptor, **options) -> int:
    rows = dump(session, model, **options)
    _log(
        {
            "event": "model_dumped",
            "model": model.name,
            "table": model.table_name,
            "rows": rows,
            "append": options.get("append"),
        }
    )
    return rows


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Dump database rows as seed data in dependency order")
    parser.add_argument("--base", help=f"Declarative base as module:attribute (default: ${BASE_ENV})")
    parser.add_argument(
        "--print-order",
        action="store_true",
        help="Log the computed model order and exit without writing seed data",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    args = _parser().parse_args(argv)
    load_env_if_present()
    env = dict(os.environ)

    try:
        target = args.base or env.get(BASE_ENV)
        if not target:
            raise ConfigError(f"Pass --base or set {BASE_ENV}.")
        registry = registry_from_declarative(load_base(target))

        SessionLocal = make_session_factory()
        with SessionLocal() as db:
            if args.print_order:
                ordered = ordered_models_from_env(env, registry, db)
                _log({"event": "dump_order", "models": [m.name for m in ordered]})
                return 0

            _log({"event": "dump_started", "registry_size": len(registry)})
            dumped = dump_using_environment(env, session=db, registry=registry, dumper=_dump_and_log)
            _log({"event": "dump_completed", "models": [m.name for m in dumped], "errors": 0})
            return 0
    except (SeedDumpError, SQLAlchemyError, OSError) as ex:
        _log(
            {
                "event": "dump_failed",
                "error_type": type(ex).__name__,
                "error": str(ex),
                "errors": 1,
            }
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
