"""Shared fixtures for specrules tests."""

import json
from pathlib import Path
from typing import Any

import pytest

from specrules.common.settings import SpeculationSettings
from tests.utils import PAGE_HTML


@pytest.fixture
def page_html() -> str:
    """A minimal HTML document with a head and a body."""
    return PAGE_HTML


@pytest.fixture
def raw_settings() -> dict[str, Any]:
    """Raw settings in the store layout, as the admin form posts them.

    Returns:
        A prerender configuration with two match patterns, one exclude
        pattern and no category restriction.
    """
    return {
        "type": "prerender",
        "eagerness": "eager",
        "match_urls": "/a\n/b\n",
        "exclude_urls": "/c",
    }


@pytest.fixture
def settings(raw_settings: dict[str, Any]) -> SpeculationSettings:
    """Sanitized settings built from ``raw_settings``."""
    return SpeculationSettings.from_raw(raw_settings)


@pytest.fixture
def settings_file(tmp_path: Path, raw_settings: dict[str, Any]) -> Path:
    """A JSON settings file holding ``raw_settings``."""
    path = tmp_path / "speculation.json"
    path.write_text(json.dumps(raw_settings), encoding="utf-8")
    return path
