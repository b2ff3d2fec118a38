"""Application-level constants."""

# Output filenames (under <output_dir>/<run_id>/)
LOG_FILENAME = "migration.log"
REPORT_FILENAME = "report.json"
ERRORS_FILENAME = "errors.csv"
CONFIG_SNAPSHOT_FILENAME = "config.resolved.json"

# Pipeline stage labels used in error details and log context
STAGE_READ = "read"
STAGE_PARSE = "parse"
STAGE_NORMALIZE = "normalize"
STAGE_CHECK_EXISTING = "check_existing"
STAGE_PERSIST = "persist"
STAGE_TAXONOMY = "taxonomy"
STAGE_LINKING = "linking"

# Columns of the error-detail table
ERROR_COLUMNS = ["source", "stage", "error"]
