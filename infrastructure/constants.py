from pathlib import Path

# Repo-root conventional directories/files (overrideable via migration.yaml / environment)
CONFIG_DIR = Path("configs")
MIGRATION_CONFIG_FILE = CONFIG_DIR / "migration.yaml"

CONTENT_DIR = Path("content")
IMAGE_DIR = Path("static") / "images"
OUTPUT_DIR = Path("outputs")

DOCUMENT_EXTENSIONS = (".md", ".mdx")
DEFAULT_BATCH_SIZE = 10

# Environment variables recognised by the config loader
ENV_DATABASE_URL = "DATABASE_URL"
ENV_CONTENT_DIR = "CONTENT_DIR"
ENV_IMAGE_DIR = "IMAGE_DIR"
ENV_BATCH_SIZE = "MIGRATION_BATCH_SIZE"
