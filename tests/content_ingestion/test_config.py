"""Tests for configuration loading and source seeding."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine

from content_ingestion import db_engine
from content_ingestion.config import (
    IngestorConfig,
    SourceConfig,
    load_config,
    load_source_configs,
    seed_sources,
)
from content_ingestion.constants import (
    DEFAULT_ARXIV_API_URL,
    DEFAULT_INGESTION_INTERVAL_SECONDS,
    SOURCES_CONFIG_PATH,
    USER_AGENT,
)
from content_ingestion.database import get_active_sources, init_db
from content_ingestion.db_engine import DEFAULT_DATABASE_URL
from content_ingestion.exceptions import ConfigError


@pytest.fixture
def temp_db():
    """Create an in-memory database for testing."""
    engine = create_engine("sqlite:///:memory:")
    db_engine.set_engine(engine)
    init_db()
    yield engine
    db_engine.reset_engine()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self):
        config = load_config({})

        assert config.database_url == DEFAULT_DATABASE_URL
        assert config.arxiv_api_url == DEFAULT_ARXIV_API_URL
        assert config.ingestion_interval_secs == DEFAULT_INGESTION_INTERVAL_SECONDS
        assert config.request_timeout_secs == 30
        assert config.user_agent == USER_AGENT
        assert config.sources_config_path == SOURCES_CONFIG_PATH

    def test_from_environment(self):
        config = load_config({
            "DATABASE_URL": "postgresql://user:pw@localhost/dashboard",
            "ARXIV_API_URL": "http://arxiv.example.com/api/query",
            "INGESTION_INTERVAL_SECS": "600",
            "REQUEST_TIMEOUT_SECS": "7.5",
            "INGESTOR_USER_AGENT": "Custom/2.0",
            "SOURCES_CONFIG_PATH": "/etc/ingestor/sources.yaml",
        })

        assert config.database_url == "postgresql://user:pw@localhost/dashboard"
        assert config.arxiv_api_url == "http://arxiv.example.com/api/query"
        assert config.ingestion_interval_secs == 600
        assert config.request_timeout_secs == 7.5
        assert config.user_agent == "Custom/2.0"
        assert config.sources_config_path == Path("/etc/ingestor/sources.yaml")

    def test_empty_values_use_defaults(self):
        config = load_config({"DATABASE_URL": "", "INGESTION_INTERVAL_SECS": ""})
        assert config.database_url == DEFAULT_DATABASE_URL
        assert config.ingestion_interval_secs == DEFAULT_INGESTION_INTERVAL_SECONDS

    @pytest.mark.parametrize("value", ["abc", "1.5", "0", "-60"])
    def test_invalid_interval(self, value):
        with pytest.raises(ConfigError, match="INGESTION_INTERVAL_SECS"):
            load_config({"INGESTION_INTERVAL_SECS": value})

    def test_invalid_timeout(self):
        with pytest.raises(ConfigError, match="REQUEST_TIMEOUT_SECS"):
            load_config({"REQUEST_TIMEOUT_SECS": "soon"})

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("INGESTION_INTERVAL_SECS", "120")
        assert load_config().ingestion_interval_secs == 120

    def test_config_is_immutable(self):
        config = IngestorConfig()
        with pytest.raises(AttributeError):
            config.user_agent = "other"


class TestLoadSourceConfigs:
    """Tests for load_source_configs function."""

    def test_load_valid_config(self, tmp_path: Path):
        config_file = tmp_path / "sources.yaml"
        config_file.write_text("""
sources:
  - name: "arxiv-test"
    type: arxiv
    medium: paper
    frequency: daily
    meta:
      query: "cat:cs.AI"
  - name: "Test Blog"
    type: rss
    medium: blog
    ingest_url: "https://example.com/feed.xml"
""")
        configs = load_source_configs(config_file)

        assert configs == [
            SourceConfig(
                name="arxiv-test",
                source_type="arxiv",
                medium="paper",
                frequency="daily",
                meta={"query": "cat:cs.AI"},
            ),
            SourceConfig(
                name="Test Blog",
                source_type="rss",
                medium="blog",
                ingest_url="https://example.com/feed.xml",
            ),
        ]

    def test_missing_file(self, tmp_path: Path):
        assert load_source_configs(tmp_path / "nonexistent.yaml") == []

    def test_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "sources.yaml"
        config_file.write_text("")
        assert load_source_configs(config_file) == []

    def test_unknown_type_kept(self, tmp_path: Path):
        config_file = tmp_path / "sources.yaml"
        config_file.write_text("""
sources:
  - name: "Podcast"
    type: podcast
    medium: blog
""")
        configs = load_source_configs(config_file)
        assert [c.source_type for c in configs] == ["podcast"]

    def test_unknown_medium_rejected(self, tmp_path: Path):
        config_file = tmp_path / "sources.yaml"
        config_file.write_text("""
sources:
  - name: "Radio"
    type: rss
    medium: radio
""")
        with pytest.raises(ConfigError, match="radio"):
            load_source_configs(config_file)

    @pytest.mark.parametrize("entry, missing", [
        ("  - type: rss\n    medium: blog\n", "name"),
        ("  - name: \"Blog\"\n    medium: blog\n", "type"),
        ("  - name: \"Blog\"\n    type: rss\n", "medium"),
    ])
    def test_missing_keys_rejected(self, tmp_path: Path, entry, missing):
        config_file = tmp_path / "sources.yaml"
        config_file.write_text("sources:\n" + entry)
        with pytest.raises(ConfigError, match=f"missing {missing}$"):
            load_source_configs(config_file)

    def test_malformed_yaml_rejected(self, tmp_path: Path):
        config_file = tmp_path / "sources.yaml"
        config_file.write_text("sources: [unclosed")
        with pytest.raises(ConfigError):
            load_source_configs(config_file)

    def test_bundled_sources(self):
        configs = load_source_configs(SOURCES_CONFIG_PATH)

        assert len(configs) == 10
        names = [c.name for c in configs]
        assert len(names) == len(set(names))
        arxiv = [c for c in configs if c.source_type == "arxiv"]
        assert len(arxiv) == 1
        assert arxiv[0].meta["query"] == "cat:q-fin.GN"
        assert all(c.ingest_url for c in configs if c.source_type == "rss")


class TestSeedSources:
    """Tests for seed_sources function."""

    def test_seed_creates_sources(self, temp_db):
        configs = [
            SourceConfig(name="arxiv-test", source_type="arxiv", medium="paper", meta={"query": "cat:cs.AI"}),
            SourceConfig(name="Blog", source_type="rss", medium="blog", ingest_url="https://example.com/feed"),
        ]
        config = IngestorConfig(arxiv_api_url="http://arxiv.example.com/api/query")

        seeded = seed_sources(configs, config)

        assert [s.name for s in seeded] == ["arxiv-test", "Blog"]
        assert seeded[0].ingest_url == "http://arxiv.example.com/api/query"
        assert seeded[0].meta == {"query": "cat:cs.AI"}
        assert seeded[1].ingest_url == "https://example.com/feed"

    def test_seed_twice_is_idempotent(self, temp_db):
        configs = load_source_configs(SOURCES_CONFIG_PATH)

        first = seed_sources(configs, IngestorConfig())
        second = seed_sources(configs, IngestorConfig())

        assert [s.id for s in first] == [s.id for s in second]
        assert len(get_active_sources()) == len(configs)
