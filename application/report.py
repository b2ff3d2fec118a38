"""Aggregate run statistics, the end-of-run summary and report artifacts."""

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from application.constants import ERROR_COLUMNS, ERRORS_FILENAME, REPORT_FILENAME
from domain.schemas import DocumentOutcome, DocumentResult, ErrorDetail

logger = logging.getLogger(__name__)


@dataclass
class MigrationStats:
    processed: int = 0
    errors: int = 0
    skipped: int = 0
    taxonomy_errors: int = 0
    link_errors: int = 0
    links: int = 0
    categories: int = 0
    tags: int = 0
    error_details: list[ErrorDetail] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, result: DocumentResult) -> None:
        """Fold one document result into the counters."""
        with self._lock:
            if result.outcome is DocumentOutcome.PROCESSED:
                self.processed += 1
            elif result.outcome is DocumentOutcome.SKIPPED:
                self.skipped += 1
            else:
                self.errors += 1
                self.error_details.append(
                    ErrorDetail(source=result.path, stage=result.stage or "-", error=result.error or "")
                )

    def record_error(self, *, source: str, stage: str, error: str, link: bool = False) -> None:
        """Record a taxonomy-load (default) or linking failure."""
        with self._lock:
            if link:
                self.link_errors += 1
            else:
                self.taxonomy_errors += 1
            self.error_details.append(ErrorDetail(source=source, stage=stage, error=error))

    def add_links(self, n: int) -> None:
        with self._lock:
            self.links += n

    @property
    def total_errors(self) -> int:
        return self.errors + self.taxonomy_errors + self.link_errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "errors": self.errors,
            "skipped": self.skipped,
            "taxonomy_errors": self.taxonomy_errors,
            "link_errors": self.link_errors,
            "links": self.links,
            "categories": self.categories,
            "tags": self.tags,
            "error_details": [d.model_dump() for d in self.error_details],
        }


def log_migration_summary(stats: MigrationStats, *, verbose: bool = False, dry_run: bool = False) -> None:
    """
    Log a concise, human-readable migration summary.

    Args:
        stats: Aggregate counters of the run
        verbose: Also list every recorded error
        dry_run: Mark the summary as a dry run (nothing was written)
    """
    logger.info("=== Migration Summary%s ===", " (dry run)" if dry_run else "")
    logger.info("Processed: %d posts", stats.processed)
    logger.info("Errors: %d", stats.errors)
    logger.info("Skipped: %d", stats.skipped)
    logger.info("Categories: %d", stats.categories)
    logger.info("Tags: %d", stats.tags)
    if not dry_run:
        logger.info("Links created: %d", stats.links)
    if stats.taxonomy_errors or stats.link_errors:
        logger.info("Taxonomy errors: %d, link errors: %d", stats.taxonomy_errors, stats.link_errors)

    if verbose and stats.error_details:
        logger.info("--- Error details ---")
        for detail in stats.error_details:
            logger.info("%s [%s]: %s", detail.source, detail.stage, detail.error)


def save_report(
    stats: MigrationStats,
    run_dir: Path,
    *,
    extra: dict[str, Any] | None = None,
) -> tuple[Path, Path]:
    """
    Write report.json (counters + error details) and errors.csv into run_dir.

    Returns:
        (report_path, errors_path)
    """
    run_dir.mkdir(parents=True, exist_ok=True)

    payload = stats.to_dict()
    if extra:
        payload.update(extra)

    report_path = run_dir / REPORT_FILENAME
    with report_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    errors_df = pd.DataFrame([d.model_dump() for d in stats.error_details], columns=ERROR_COLUMNS)
    errors_path = run_dir / ERRORS_FILENAME
    errors_df.to_csv(errors_path, index=False)

    logger.info("Saved report to %s", report_path)
    return report_path, errors_path
