"""
Application layer: Use cases and workflow orchestration.

This layer coordinates between domain logic and infrastructure,
implementing the migration workflow: concurrent content loading,
taxonomy materialization, linking and reporting.
"""

from application.batching import chunked, iter_segments
from application.orchestrator import MigrationAbortedError, MigrationOrchestrator, MigrationState
from application.report import MigrationStats, log_migration_summary, save_report
from application.scheduler import DocumentScheduler

__all__ = [
    # Main workflow
    "MigrationOrchestrator",
    "MigrationState",
    "MigrationAbortedError",
    "DocumentScheduler",
    # Reporting
    "MigrationStats",
    "log_migration_summary",
    "save_report",
    # Batching utilities
    "iter_segments",
    "chunked",
]
