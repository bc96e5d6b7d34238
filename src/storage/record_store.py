"""
Record Store

Client-local persistence for Stitchbook. Each fixed key maps to one JSON
document under DATA_FOLDER wrapped in a versioned envelope:

    {"schema_version": 1, "key": "designs", "updated_at": "...", "data": [...]}

Writes are synchronous and atomic (temp file + os.replace) so a value is on
disk before the caller returns.
"""
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Optional

import config
from errors import StorageError
from utils.logger import get_logger


class RecordStore:
    """Key -> JSON document store on the local filesystem."""

    def __init__(self, data_dir: Optional[str] = None,
                 schema_version: int = config.STORAGE_SCHEMA_VERSION):
        self.data_dir = Path(data_dir or config.DATA_FOLDER)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.schema_version = schema_version
        self.lock = Lock()
        self.logger = get_logger()

    def _path_for(self, key: str) -> Path:
        if not key or not key.replace('_', '').replace('-', '').isalnum():
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read the value stored under `key`.

        Returns `default` when the key was never written or the document is
        unreadable. Raises StorageError for a document written by a newer
        schema version.
        """
        path = self._path_for(key)
        if not path.exists():
            return default

        try:
            with open(path, 'r', encoding='utf-8') as f:
                envelope = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self.logger.error(f"Unreadable document for key '{key}': {e}", component="Store")
            return default

        # Bare values predate the envelope
        if not isinstance(envelope, dict) or 'schema_version' not in envelope:
            return envelope

        version = envelope.get('schema_version')
        if not isinstance(version, int) or version > self.schema_version:
            raise StorageError(
                f"Document '{key}' has schema version {version}; "
                f"this build reads up to {self.schema_version}"
            )
        return envelope.get('data', default)

    def set(self, key: str, value: Any) -> None:
        """Persist `value` under `key`, replacing the previous document."""
        path = self._path_for(key)
        envelope = {
            'schema_version': self.schema_version,
            'key': key,
            'updated_at': datetime.now(timezone.utc).isoformat(),
            'data': value,
        }

        with self.lock:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{key}.", suffix='.tmp', dir=str(self.data_dir))
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(envelope, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
            except Exception:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise

        self.logger.debug(f"Persisted key '{key}'", component="Store")

    def delete(self, key: str) -> bool:
        """Remove the document for `key`. Returns False if it did not exist."""
        path = self._path_for(key)
        with self.lock:
            if not path.exists():
                return False
            path.unlink()
        return True
