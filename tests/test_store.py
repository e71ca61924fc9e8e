"""Tests for settings stores."""

import json
import threading

import pytest

from specrules.common.exceptions import SettingsFormatException
from specrules.common.settings import SpeculationAction, SpeculationSettings
from specrules.store import (
    InMemorySettingsStore,
    JsonFileSettingsStore,
    load_settings,
)


class TestInMemorySettingsStore:
    """Tests for the in-memory store."""

    def test_empty_store_loads_none(self):
        assert InMemorySettingsStore().load() is None

    def test_save_and_load(self, raw_settings):
        store = InMemorySettingsStore()
        store.save(raw_settings)
        assert store.load() == raw_settings

    def test_copies_are_isolated(self, raw_settings):
        store = InMemorySettingsStore(raw_settings)
        raw_settings["type"] = "prefetch"
        loaded = store.load()
        loaded["type"] = "changed"

        assert store.load()["type"] == "prerender"

    def test_concurrent_saves(self):
        store = InMemorySettingsStore()

        def writer(n: int) -> None:
            for _ in range(50):
                store.save({"match_urls": f"/{n}"})

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.load()["match_urls"] in {f"/{n}" for n in range(8)}


class TestJsonFileSettingsStore:
    """Tests for the JSON file store."""

    def test_missing_file_loads_none(self, tmp_path):
        store = JsonFileSettingsStore(tmp_path / "absent.json")
        assert store.load() is None

    def test_load(self, settings_file, raw_settings):
        assert JsonFileSettingsStore(settings_file).load() == raw_settings

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SettingsFormatException) as exc_info:
            JsonFileSettingsStore(path).load()

        assert exc_info.value.source == str(path)
        assert exc_info.value.actual_type == "invalid JSON"
        assert "detail" in exc_info.value.context

    def test_non_utf8_bytes(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"match_urls": "/caf\xe9"}')

        with pytest.raises(SettingsFormatException) as exc_info:
            JsonFileSettingsStore(path).load()

        assert exc_info.value.actual_type == "undecodable bytes"
        assert "detail" in exc_info.value.context

    def test_directory_is_unreadable(self, tmp_path):
        with pytest.raises(SettingsFormatException) as exc_info:
            JsonFileSettingsStore(tmp_path).load()

        assert exc_info.value.actual_type == "unreadable file"

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text('["/a", "/b"]', encoding="utf-8")

        with pytest.raises(SettingsFormatException, match="got list"):
            JsonFileSettingsStore(path).load()

    def test_save_creates_parents_and_round_trips(self, tmp_path, raw_settings):
        path = tmp_path / "nested" / "dir" / "speculation.json"
        store = JsonFileSettingsStore(path)
        store.save(raw_settings)

        assert json.loads(path.read_text(encoding="utf-8")) == raw_settings
        assert store.load() == raw_settings

    def test_save_leaves_no_temp_files(self, tmp_path, raw_settings):
        store = JsonFileSettingsStore(tmp_path / "speculation.json")
        store.save(raw_settings)
        store.save({"type": "prefetch"})

        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "speculation.json"
        ]
        assert store.load() == {"type": "prefetch"}


class TestLoadSettings:
    """Tests for loading sanitized settings from a store."""

    def test_sanitizes(self):
        store = InMemorySettingsStore(
            {"type": "PRERENDER", "match_urls": "/a\n\n"}
        )
        settings = load_settings(store)
        assert settings.type is SpeculationAction.PRERENDER
        assert settings.match_patterns == ("/a",)

    def test_empty_store_gives_defaults(self):
        assert load_settings(InMemorySettingsStore()) == SpeculationSettings()

    def test_errors_name_the_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("3", encoding="utf-8")

        with pytest.raises(SettingsFormatException, match="bad.json"):
            load_settings(JsonFileSettingsStore(path))
