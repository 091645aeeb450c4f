"""Tests for application settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from searchbattle.config.settings import ElasticsearchSettings, SearchSettings, Settings


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.search.page_size == 10
        assert s.database.table == "reviews"
        assert s.elasticsearch.index == "reviews"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SEARCHBATTLE_SEARCH__ADAPTER_TIMEOUT", "3.5")
        monkeypatch.setenv("SEARCHBATTLE_ELASTICSEARCH__API_KEY", "secret")

        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.search.adapter_timeout == 3.5
        assert s.elasticsearch.api_key == "secret"

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "searchbattle-config.yaml"
        path.write_text("database:\n  table: movie_reviews\nsearch:\n  page_size: 5\n", encoding="utf-8")

        s = Settings.from_yaml(path)
        assert s.database.table == "movie_reviews"
        assert s.search.page_size == 5

    def test_env_overrides_yaml_key(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "searchbattle-config.yaml"
        path.write_text("search:\n  page_size: 5\n  adapter_timeout: 4\n", encoding="utf-8")
        monkeypatch.setenv("SEARCHBATTLE_SEARCH__PAGE_SIZE", "7")

        s = Settings.from_yaml(path)
        assert s.search.page_size == 7
        # Keys the environment does not set still come from the file.
        assert s.search.adapter_timeout == 4

    def test_yaml_does_not_leak_into_later_loads(self, tmp_path: Path) -> None:
        path = tmp_path / "searchbattle-config.yaml"
        path.write_text("database:\n  table: movie_reviews\n", encoding="utf-8")

        Settings.from_yaml(path)
        assert Settings(_env_file=None).database.table == "reviews"  # type: ignore[call-arg]

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "nope.yaml")


class TestElasticsearchHosts:
    def test_json_list(self) -> None:
        assert ElasticsearchSettings(hosts='["http://a:9200", "http://b:9200"]').hosts == ["http://a:9200", "http://b:9200"]

    def test_plain_string(self) -> None:
        assert ElasticsearchSettings(hosts="https://es.example.com").hosts == ["https://es.example.com"]

    def test_plain_url_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SEARCHBATTLE_ELASTICSEARCH__HOSTS", "https://es.example.com:443")

        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.elasticsearch.hosts == ["https://es.example.com:443"]

    def test_json_list_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SEARCHBATTLE_ELASTICSEARCH__HOSTS", '["http://a:9200", "http://b:9200"]')

        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.elasticsearch.hosts == ["http://a:9200", "http://b:9200"]


class TestSearchSettings:
    def test_timeout_is_bounded(self) -> None:
        with pytest.raises(ValidationError):
            SearchSettings(adapter_timeout=301)

    def test_page_size_is_positive(self) -> None:
        with pytest.raises(ValidationError):
            SearchSettings(page_size=0)
