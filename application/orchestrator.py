"""
Migration stage sequencing.

VALIDATING -> LOADING_CONTENT -> LOADING_TAXONOMY -> LINKING -> REPORTING -> DONE,
with ABORTED as the terminal state for precondition failures and for any
unexpected exception escaping a stage.
"""

import logging
from enum import Enum
from pathlib import Path

from application.constants import STAGE_LINKING, STAGE_TAXONOMY
from application.report import MigrationStats, log_migration_summary, save_report
from application.scheduler import DocumentScheduler
from domain.content.slugs import slugify
from domain.schemas import TaxonomyKind
from domain.taxonomy import TaxonomyAccumulator, taxonomy_names
from infrastructure.config.models import MigrationConfig, StoreBackend
from infrastructure.io import iter_document_paths
from infrastructure.observability import get_log_context, set_log_context
from infrastructure.store.base import ContentStore, StoreError

logger = logging.getLogger(__name__)


class MigrationState(str, Enum):
    VALIDATING = "validating"
    LOADING_CONTENT = "loading_content"
    LOADING_TAXONOMY = "loading_taxonomy"
    LINKING = "linking"
    REPORTING = "reporting"
    DONE = "done"
    ABORTED = "aborted"


class MigrationAbortedError(RuntimeError):
    """A precondition failed; nothing was migrated."""


class MigrationOrchestrator:
    """
    Run one migration end to end against a store.

    The store (and its pool) is owned by the caller and passed in; the
    orchestrator never opens a second pool.
    """

    def __init__(self, cfg: MigrationConfig, store: ContentStore, *, run_dir: Path | None = None) -> None:
        self.cfg = cfg
        self.store = store
        self.run_dir = run_dir
        self.accumulator = TaxonomyAccumulator()
        self.stats = MigrationStats()
        self.state: MigrationState | None = None
        self.history: list[MigrationState] = []

    def _enter(self, state: MigrationState) -> None:
        self.state = state
        self.history.append(state)
        set_log_context(stage=state.value)
        logger.debug("Migration state -> %s", state.value)

    def run(self) -> MigrationStats:
        try:
            self._enter(MigrationState.VALIDATING)
            self.validate()

            self._enter(MigrationState.LOADING_CONTENT)
            self.load_content()

            self._enter(MigrationState.LOADING_TAXONOMY)
            self.load_taxonomy()

            self._enter(MigrationState.LINKING)
            self.link_taxonomy()

            self._enter(MigrationState.REPORTING)
            self.report()
        except Exception:
            failed_in = self.state
            self._enter(MigrationState.ABORTED)
            logger.debug("Migration aborted during %s", failed_in.value if failed_in else "-")
            raise

        self._enter(MigrationState.DONE)
        return self.stats

    # ---- stages ----

    def validate(self) -> None:
        """Check every precondition; raise MigrationAbortedError on the first failure."""
        logger.info("Starting content migration%s...", " (dry run)" if self.cfg.dry_run else "")

        if self.store.backend is StoreBackend.POSTGRES and not self.cfg.database_url:
            raise MigrationAbortedError("DATABASE_URL environment variable is required")

        content_dir = self.cfg.content_dir
        if not content_dir.exists():
            raise MigrationAbortedError(f"Content directory not found: {content_dir}")
        if not content_dir.is_dir():
            raise MigrationAbortedError(f"Content path is not a directory: {content_dir}")
        logger.info("Content directory: %s (batch size %d)", content_dir, self.cfg.batch_size)
        if not self.cfg.image_dir.is_dir():
            logger.warning("Image directory not found: %s", self.cfg.image_dir)

        try:
            self.store.check_connection()
            logger.info("Database connection successful")
            missing = self.store.missing_tables()
        except StoreError as exc:
            raise MigrationAbortedError(str(exc)) from exc

        if missing:
            raise MigrationAbortedError(f"Required table(s) missing: {', '.join(missing)}")

    def load_content(self) -> None:
        paths = iter_document_paths(self.cfg.content_dir, self.cfg.extensions)
        logger.info("Found %d content files", len(paths))

        scheduler = DocumentScheduler(cfg=self.cfg, store=self.store, accumulator=self.accumulator)
        for result in scheduler.run(paths):
            self.stats.record(result)

        self.stats.categories = self.accumulator.count(TaxonomyKind.CATEGORY)
        self.stats.tags = self.accumulator.count(TaxonomyKind.TAG)

    def load_taxonomy(self) -> None:
        """Create every accumulated category and tag; one failure never stops the rest."""
        for kind in TaxonomyKind:
            items = self.accumulator.items(kind)
            logger.info("Loading %d %s entities...", len(items), kind.value)
            for slug, name in items:
                if self.cfg.dry_run:
                    logger.info("Would create %s: %s", kind.value, name)
                    continue
                try:
                    self.store.ensure_taxonomy_entity(kind, name, slug)
                except Exception as exc:
                    logger.error("Error creating %s %s: %s", kind.value, name, exc)
                    self.stats.record_error(source=name, stage=STAGE_TAXONOMY, error=str(exc))

    def link_taxonomy(self) -> None:
        """Re-derive taxonomy names from persisted metadata and write the link rows."""
        if self.cfg.dry_run:
            logger.info("Dry run: skipping taxonomy linking")
            return

        try:
            persisted = self.store.iter_persisted_content()
        except StoreError as exc:
            logger.error("Error reading posts for linking: %s", exc)
            self.stats.record_error(source="posts", stage=STAGE_LINKING, error=str(exc), link=True)
            return

        id_cache: dict[tuple[TaxonomyKind, str], int | None] = {}
        for post in persisted:
            created = 0
            try:
                for kind in TaxonomyKind:
                    for name in taxonomy_names(post.frontmatter, kind):
                        slug = slugify(name)
                        key = (kind, slug)
                        if key not in id_cache:
                            id_cache[key] = self.store.find_taxonomy_id(kind, slug) if slug else None
                        entity_id = id_cache[key]
                        if entity_id is None:
                            logger.debug("No %s found for %r (post %s)", kind.value, name, post.slug)
                            continue
                        self.store.link_content_to_taxonomy(kind, post.id, entity_id)
                        created += 1
            except Exception as exc:
                logger.error("Error linking taxonomy for post %s: %s", post.slug, exc)
                self.stats.record_error(source=post.slug, stage=STAGE_LINKING, error=str(exc), link=True)
            finally:
                self.stats.add_links(created)

        logger.info("Taxonomy links written: %d", self.stats.links)

    def report(self) -> None:
        log_migration_summary(self.stats, verbose=self.cfg.verbose, dry_run=self.cfg.dry_run)
        if self.run_dir is not None:
            save_report(
                self.stats,
                self.run_dir,
                extra={"dry_run": self.cfg.dry_run, "log_context": get_log_context()},
            )
