"""
JSON document store backing every persisted map of the bot.

Each logical name (``roles``, ``banned_commands``...) maps to one JSON file in
the data directory. Reads never raise: a missing file is created with an empty
object, an unreadable one degrades to ``{}``. Writes are synchronous and never
raise either; on failure the in-memory state stays authoritative for the rest
of the session.
"""

from __future__ import annotations

import fcntl
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping

from roomkeeper.util.logger import get_logger

logger = get_logger("json_store")


class JsonStore:
    """Load/save named JSON documents under a single directory."""

    def __init__(self, data_dir: Path, file_names: Mapping[str, str]) -> None:
        self.data_dir = Path(data_dir)
        self.file_names: Dict[str, str] = dict(file_names)

    def path_for(self, name: str) -> Path:
        file_name = self.file_names.get(name, f"{name}.json")
        return self.data_dir / file_name

    def load(self, name: str) -> Dict[str, Any]:
        """
        Load a document by logical name.

        A missing file is written back as ``{}`` immediately. Parse or I/O
        errors are logged and yield ``{}``; the broken file is left untouched.
        """
        path = self.path_for(name)
        try:
            with path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = json.load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.warning("[JSON STORE] File not found: %s. Creating with default empty object.", path)
            self.save(name, {})
            return {}
        except (OSError, ValueError) as exc:
            logger.error("[JSON STORE] Error loading %s: %s", path, exc)
            return {}

        if not isinstance(data, dict):
            logger.error("[JSON STORE] %s does not contain a JSON object; using empty default.", path)
            return {}
        return data

    def save(self, name: str, record: Mapping[str, Any]) -> bool:
        """
        Persist a document, replacing the previous file atomically.

        Returns:
            bool: True on success, False if the write failed (already logged).
        """
        path = self.path_for(name)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    json.dump(record, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            os.replace(tmp_path, path)
            return True
        except (OSError, TypeError, ValueError) as exc:
            logger.error("[JSON STORE] Error saving %s: %s", path, exc)
            return False
