"""
CLI entrypoint for the content migration.

This script performs the following steps:
- loads .env (when present) and configs/migration.yaml (when present)
- applies CLI flags on top of the file/environment configuration
- creates a per-run output folder under outputs/
- builds the content store (one connection pool for the whole run)
- validates preconditions, loads content in concurrent batches,
  materializes categories/tags and links them to posts
- logs a human-readable summary and saves report.json / errors.csv
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from application import MigrationAbortedError, MigrationOrchestrator
from application.constants import CONFIG_SNAPSHOT_FILENAME, LOG_FILENAME
from infrastructure.config import StoreBackend, load_migration_config
from infrastructure.observability import configure_logging, make_run_tag, set_log_context
from infrastructure.store import ContentStore, StoreError, make_store

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Migrate markdown content into the content database")
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to migration.yaml (default: configs/migration.yaml if present)",
    )
    p.add_argument(
        "--env",
        type=str,
        default=".env",
        help="Path to .env file (default: .env, skipped if missing)",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and count everything, but write nothing to the database.",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-document progress and every error detail.",
    )
    p.add_argument(
        "--skip-existing",
        action="store_true",
        help="Skip documents whose slug is already stored.",
    )
    p.add_argument(
        "--memory-store",
        action="store_true",
        help="Use the in-memory store instead of PostgreSQL.",
    )
    p.add_argument(
        "--console-level",
        type=str,
        default="INFO",
        choices=LOG_LEVELS,
        help="Console log level",
    )
    p.add_argument(
        "--file-level",
        type=str,
        default="DEBUG",
        choices=LOG_LEVELS,
        help="File log level",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)

    console_level = getattr(logging, args.console_level)
    # Console-only until the run folder exists
    configure_logging(console_level=console_level)

    # Flags only switch things on; unset flags leave file/env values alone
    overrides = {
        "dry_run": True if args.dry_run else None,
        "verbose": True if args.verbose else None,
        "skip_existing": True if args.skip_existing else None,
        "backend": StoreBackend.MEMORY if args.memory_store else None,
    }
    try:
        cfg = load_migration_config(
            Path(args.config) if args.config else None,
            overrides=overrides,
        )
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    # ---- Per-run output folder ----
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_id = f"{ts}_{cfg.backend.value}_bs{cfg.batch_size}{'_dryrun' if cfg.dry_run else ''}"

    run_dir: Path | None = None
    if cfg.output_dir is not None:
        run_dir = cfg.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        configure_logging(
            log_file=run_dir / LOG_FILENAME,
            console_level=console_level,
            file_level=getattr(logging, args.file_level),
        )
        (run_dir / CONFIG_SNAPSHOT_FILENAME).write_text(
            json.dumps(cfg.model_dump(mode="json", exclude={"database_url"}), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    set_log_context(run_id_full=run_id)
    logger.info("Starting run: run_id=%s (run_tag=%s)", run_id, make_run_tag(run_id))
    if run_dir is not None:
        logger.info("Run output directory: %s", run_dir)

    store: ContentStore | None = None
    try:
        store = make_store(cfg)
        MigrationOrchestrator(cfg, store, run_dir=run_dir).run()
    except (MigrationAbortedError, StoreError) as exc:
        logger.error("Migration failed: %s", exc)
        return 1
    finally:
        if store is not None:
            store.close()

    if run_dir is not None:
        logger.info("Detailed log: %s", run_dir / LOG_FILENAME)
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
