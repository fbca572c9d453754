"""Durable mirror for the ledger, the audit log and the request inbox.

The mirror is a flat key/value store of JSON documents. It is a serialized
copy of the session state, never a second source of truth: the session reads
it once on load and writes every collection back wholesale after a mutation.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from .errors import PersistenceError

LOGGER = logging.getLogger(__name__)

DEBT_ENTRIES_KEY = "debtEntries"
LOGS_KEY = "logs"
REQUESTS_KEY = "requests"
ADMIN_KEY = "adminKey"


class InMemoryMirror:
    """Mirror kept in a dict of serialized strings, like browser local storage."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self.items: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.items[key] = json.dumps(value)

    def get(self, key: str) -> Any:
        raw = self.items.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Stored value for {key!r} is not valid JSON") from e

    def save_many(self, values: dict[str, Any]) -> None:
        try:
            encoded = {key: json.dumps(value) for key, value in values.items()}
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Could not serialize {sorted(values)}") from e
        self.items.update(encoded)

    def save(self, key: str, value: Any) -> None:
        self.save_many({key: value})


class JsonFileMirror:
    """Mirror backed by one ``<key>.json`` file per key in a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Any:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {path}") from e

    def save_many(self, values: dict[str, Any]) -> None:
        try:
            encoded = {key: json.dumps(value, indent=2, ensure_ascii=False) for key, value in values.items()}
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Could not serialize {sorted(values)}") from e
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._replace_all({self._path(key): text for key, text in encoded.items()})
        except OSError as e:
            LOGGER.error("Mirror write to %s failed", self.directory, exc_info=True)
            raise PersistenceError(f"Could not write to {self.directory}: {e}") from e

    def save(self, key: str, value: Any) -> None:
        self.save_many({key: value})

    def _replace_all(self, texts: dict[Path, str]) -> None:
        """Replace every file in ``texts`` or none of them.

        All new contents are staged in temp files first. If a rename fails
        part-way, the files already renamed get their previous contents back.
        """
        previous = {path: path.read_text(encoding="utf-8") if path.exists() else None for path in texts}
        staged: dict[Path, str] = {}
        try:
            for path, text in texts.items():
                staged[path] = self._write_temp(path, text)
        except OSError:
            self._discard(staged.values())
            raise

        replaced: list[Path] = []
        try:
            for path, tmp_name in staged.items():
                os.replace(tmp_name, path)
                replaced.append(path)
        except OSError:
            self._discard(tmp for path, tmp in staged.items() if path not in replaced)
            self._restore(replaced, previous)
            raise

    def _restore(self, paths: list[Path], previous: dict[Path, Optional[str]]) -> None:
        for path in paths:
            old = previous[path]
            if old is None:
                path.unlink(missing_ok=True)
            else:
                os.replace(self._write_temp(path, old), path)
        if paths:
            LOGGER.warning("Rolled back %s after a failed mirror write", ", ".join(p.name for p in paths))

    def _write_temp(self, path: Path, text: str) -> str:
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError:
            self._discard([tmp_name])
            raise
        return tmp_name

    @staticmethod
    def _discard(tmp_names) -> None:
        for tmp_name in tmp_names:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
