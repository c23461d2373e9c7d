"""
Configuration for the content ingestion pipeline.

Process settings come from the environment and are passed around as an
IngestorConfig value. Default sources are declared in data/sources.yaml.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

import yaml

from content_ingestion.constants import (
    DEFAULT_ARXIV_API_URL,
    DEFAULT_INGESTION_INTERVAL_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    SOURCES_CONFIG_PATH,
    USER_AGENT,
)
from content_ingestion.database import get_or_create_source
from content_ingestion.db_engine import DEFAULT_DATABASE_URL
from content_ingestion.exceptions import ConfigError
from content_ingestion.models import Medium, Source, SourceType
from util.logging_util import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class IngestorConfig:
    """Settings shared by the parsers, the cycle runner and the scheduler."""
    database_url: str = DEFAULT_DATABASE_URL
    arxiv_api_url: str = DEFAULT_ARXIV_API_URL
    ingestion_interval_secs: int = DEFAULT_INGESTION_INTERVAL_SECONDS
    request_timeout_secs: float = REQUEST_TIMEOUT_SECONDS
    user_agent: str = USER_AGENT
    sources_config_path: Path = SOURCES_CONFIG_PATH


def _positive_number(environ: Mapping[str, str], name: str, default, cast):
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a valid number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> IngestorConfig:
    """Build an IngestorConfig from environment variables.

    Recognised variables: DATABASE_URL, ARXIV_API_URL, INGESTION_INTERVAL_SECS,
    REQUEST_TIMEOUT_SECS, INGESTOR_USER_AGENT, SOURCES_CONFIG_PATH.
    """
    if environ is None:
        environ = os.environ

    return IngestorConfig(
        database_url=environ.get("DATABASE_URL") or DEFAULT_DATABASE_URL,
        arxiv_api_url=environ.get("ARXIV_API_URL") or DEFAULT_ARXIV_API_URL,
        ingestion_interval_secs=_positive_number(
            environ, "INGESTION_INTERVAL_SECS", DEFAULT_INGESTION_INTERVAL_SECONDS, int
        ),
        request_timeout_secs=_positive_number(
            environ, "REQUEST_TIMEOUT_SECS", REQUEST_TIMEOUT_SECONDS, float
        ),
        user_agent=environ.get("INGESTOR_USER_AGENT") or USER_AGENT,
        sources_config_path=Path(environ.get("SOURCES_CONFIG_PATH") or SOURCES_CONFIG_PATH),
    )


@dataclass
class SourceConfig:
    """Declarative definition of a source, as listed in sources.yaml."""
    name: str
    source_type: str
    medium: str
    ingest_url: Optional[str] = None
    frequency: Optional[str] = None
    meta: dict = field(default_factory=dict)


def load_source_configs(config_path: Path = SOURCES_CONFIG_PATH) -> List[SourceConfig]:
    """Load source definitions from a YAML file."""
    if not config_path.exists():
        logger.warning(f"Source config not found at {config_path}")
        return []

    with open(config_path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}") from e

    configs = []
    for source_data in data.get("sources") or []:
        missing = [key for key in ("name", "type", "medium") if not source_data.get(key)]
        if missing:
            raise ConfigError(f"Source entry {source_data!r} is missing {', '.join(missing)}")
        source_type = source_data["type"]
        medium = source_data["medium"]
        if SourceType.parse(source_type) is None:
            logger.warning(f"Source {source_data['name']} has unknown type {source_type!r}")
        if medium not in {m.value for m in Medium}:
            raise ConfigError(f"Source {source_data['name']} has unknown medium {medium!r}")
        configs.append(SourceConfig(
            name=source_data["name"],
            source_type=source_type,
            medium=medium,
            ingest_url=source_data.get("ingest_url"),
            frequency=source_data.get("frequency"),
            meta=source_data.get("meta") or {},
        ))
    return configs


def seed_sources(source_configs: List[SourceConfig], config: IngestorConfig) -> List[Source]:
    """Create or update the configured sources in the store.

    ArXiv sources without an ingest_url use the configured ArXiv API URL.
    """
    sources = []
    for source_config in source_configs:
        ingest_url = source_config.ingest_url
        if ingest_url is None and source_config.source_type == SourceType.ARXIV.value:
            ingest_url = config.arxiv_api_url

        source = get_or_create_source(
            name=source_config.name,
            source_type=source_config.source_type,
            medium=source_config.medium,
            ingest_url=ingest_url,
            meta=source_config.meta,
            frequency=source_config.frequency,
        )
        sources.append(source)

    logger.info(f"Seeded {len(sources)} sources")
    return sources
