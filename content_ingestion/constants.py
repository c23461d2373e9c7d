"""
Constants for the content ingestion pipeline.
"""

from pathlib import Path

MODULE_ROOT = Path(__file__).parent

DB_NAME = "content_ingestion.db"

SOURCES_CONFIG_PATH = MODULE_ROOT / "data" / "sources.yaml"

# ArXiv search API
DEFAULT_ARXIV_API_URL = "http://export.arxiv.org/api/query"
DEFAULT_ARXIV_QUERY = "cat:q-fin.GN"
ARXIV_MAX_RESULTS = 100

# HTTP
USER_AGENT = "AI-Dashboard-Ingestor/0.1"
REQUEST_TIMEOUT_SECONDS = 30

# How often to run an ingestion cycle (in seconds)
DEFAULT_INGESTION_INTERVAL_SECONDS = 60 * 60  # 1 hour

# Normalization limits, in characters
SUMMARY_MAX_CHARS = 500
BODY_MAX_CHARS = 10_000
TRUNCATION_MARKER = "..."

# Only the first few feed links are kept in raw_metadata
MAX_METADATA_LINKS = 3

# Allowed values for an item like
ALLOWED_LIKE_SCORES = (-1, 0, 1)
