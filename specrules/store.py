"""Settings stores.

A store keeps the raw settings map exactly as the administration form
posted it (after sanitization through ``SpeculationSettings``) and hands it
back on every page render. Stores never interpret the map; callers pass the
loaded map through ``SpeculationSettings.from_raw`` explicitly.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from specrules.common.exceptions import SettingsFormatException
from specrules.common.settings import SpeculationSettings

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    """Where raw settings live between requests."""

    def load(self) -> Mapping[str, Any] | None:
        """Return the stored raw map, or None if nothing is configured."""
        ...

    def save(self, raw: Mapping[str, Any]) -> None:
        """Replace the stored raw map."""
        ...


class InMemorySettingsStore:
    """Process-local store, mostly for tests and the demo site."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._raw: dict[str, Any] | None = (
            dict(initial) if initial is not None else None
        )

    def load(self) -> Mapping[str, Any] | None:
        with self._lock:
            return dict(self._raw) if self._raw is not None else None

    def save(self, raw: Mapping[str, Any]) -> None:
        with self._lock:
            self._raw = dict(raw)


class JsonFileSettingsStore:
    """Store backed by a single JSON object on disk.

    A missing file means nothing has been configured. Writes go to a
    temporary file in the same directory which then replaces the target, so
    readers never see a half-written file.

    Attributes:
        path: Location of the JSON file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> Mapping[str, Any] | None:
        """Read the raw map.

        Returns:
            The stored map, or None if the file does not exist.

        Raises:
            SettingsFormatException: If the file cannot be read, is not
                UTF-8 encoded JSON, or does not hold a JSON object.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No settings file at {self.path}")
            return None
        except UnicodeDecodeError as e:
            raise SettingsFormatException(
                str(self.path), "undecodable bytes", detail=str(e)
            ) from e
        except OSError as e:
            raise SettingsFormatException(
                str(self.path), "unreadable file", detail=str(e)
            ) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SettingsFormatException(
                str(self.path), "invalid JSON", detail=str(e)
            ) from e

        if not isinstance(data, dict):
            raise SettingsFormatException(str(self.path), type(data).__name__)
        return data

    def save(self, raw: Mapping[str, Any]) -> None:
        """Atomically replace the file with *raw*."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(dict(raw), fh, indent=2)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info(f"Saved speculation rules settings to {self.path}")


def load_settings(store: SettingsStore) -> SpeculationSettings:
    """Load and sanitize the settings held by *store*.

    Args:
        store: Any settings store.

    Returns:
        Sanitized settings; defaults (and therefore no rules) when the
        store is empty.
    """
    source = str(getattr(store, "path", type(store).__name__))
    return SpeculationSettings.from_raw(store.load(), source=source)
