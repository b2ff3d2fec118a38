"""Concurrent, chunked document processing with a barrier between chunks."""

import contextvars
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from application.batching import chunked
from application.constants import (
    STAGE_CHECK_EXISTING,
    STAGE_NORMALIZE,
    STAGE_PARSE,
    STAGE_PERSIST,
    STAGE_READ,
)
from domain.content import normalize_document, parse_document
from domain.schemas import DocumentOutcome, DocumentResult, TaxonomyKind
from domain.taxonomy import TaxonomyAccumulator, taxonomy_names
from infrastructure.config.models import MigrationConfig
from infrastructure.io import read_source
from infrastructure.observability.logging import clear_batch_context, set_log_context
from infrastructure.store.base import ContentStore

logger = logging.getLogger(__name__)


class DocumentScheduler:
    """
    Drives documents through read -> parse -> normalize -> (skip check) -> upsert.

    Documents are split into chunks of `cfg.batch_size`. The documents of a
    chunk run concurrently on a worker pool sized to the chunk; the next chunk
    starts only after every task of the current one (store write included)
    has finished. A failure in one task is recorded on its DocumentResult and
    never reaches sibling tasks or later chunks.
    """

    def __init__(
        self,
        *,
        cfg: MigrationConfig,
        store: ContentStore,
        accumulator: TaxonomyAccumulator,
    ) -> None:
        self.cfg = cfg
        self.store = store
        self.accumulator = accumulator
        self._progress_level = logging.INFO if cfg.verbose else logging.DEBUG

    def process_document(self, path: Path) -> DocumentResult:
        """Run the per-document pipeline; never raises."""
        stage = STAGE_READ
        slug: str | None = None
        try:
            logger.log(self._progress_level, "Processing: %s", path)
            raw_text = read_source(path)

            stage = STAGE_PARSE
            parsed = parse_document(raw_text, strict=self.cfg.strict_headers)

            stage = STAGE_NORMALIZE
            item = normalize_document(parsed.metadata, parsed.body, path, relative_to=self.cfg.content_dir)
            slug = item.slug

            # The existence check is an optimisation only; the upsert keeps slugs unique.
            if self.cfg.skip_existing and not self.cfg.dry_run:
                stage = STAGE_CHECK_EXISTING
                if self.store.find_content_id(slug) is not None:
                    logger.info("Skipping existing post: %s", slug)
                    return DocumentResult(path=str(path), outcome=DocumentOutcome.SKIPPED, slug=slug)

            for kind in TaxonomyKind:
                self.accumulator.add(kind, taxonomy_names(parsed.metadata, kind))

            content_id: int | None = None
            if not self.cfg.dry_run:
                stage = STAGE_PERSIST
                content_id = self.store.upsert_content_item(item)
                logger.log(self._progress_level, "Inserted/updated post: %s", slug)

            return DocumentResult(
                path=str(path),
                outcome=DocumentOutcome.PROCESSED,
                slug=slug,
                content_id=content_id,
            )
        except Exception as exc:
            logger.error("Error processing %s (%s): %s", path, stage, exc)
            logger.debug("Traceback for %s", path, exc_info=True)
            return DocumentResult(
                path=str(path),
                outcome=DocumentOutcome.FAILED,
                slug=slug,
                stage=stage,
                error=str(exc) or type(exc).__name__,
            )

    def run_chunk(self, chunk: Sequence[Path]) -> list[DocumentResult]:
        """Process one chunk concurrently and wait for all of it (the barrier)."""
        if not chunk:
            return []
        with ThreadPoolExecutor(max_workers=len(chunk), thread_name_prefix="migrate") as executor:
            # Each task gets its own copy of the logging context
            futures = [
                executor.submit(contextvars.copy_context().run, self.process_document, path) for path in chunk
            ]
        # Leaving the executor block joined every worker
        return [f.result() for f in futures]

    def run(self, paths: Sequence[Path]) -> list[DocumentResult]:
        """Process every path, chunk after chunk, and return one result per path (input order)."""
        results: list[DocumentResult] = []
        total = len(paths)
        done = 0

        for batch_id, chunk in enumerate(chunked(paths, self.cfg.batch_size), start=1):
            set_log_context(batch_id=batch_id)
            results.extend(self.run_chunk(chunk))
            done += len(chunk)
            logger.info("Processed %d/%d files", done, total)

        clear_batch_context()
        return results
