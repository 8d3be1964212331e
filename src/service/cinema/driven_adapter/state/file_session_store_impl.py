import os
from pathlib import Path
import tempfile
from typing import Any, Optional

import orjson

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_session_store import ISessionStore


class FileSessionStoreImpl(ISessionStore):
    """
    The session record as one JSON file.

    Saves go through a temp file + os.replace, so a reader sees either the old
    record or the new one; clear removes the file in a single unlink.
    """

    def __init__(self, *, path: Optional[Path] = None) -> None:
        self.path = Path(path or settings.SESSION_STORE_PATH)

    def load(self) -> Optional[dict[str, Any]]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        try:
            record = orjson.loads(raw)
        except orjson.JSONDecodeError:
            Logger.base.warning(f'⚠️ [SESSION] Ignoring corrupt session file {self.path}')
            return None
        return record if isinstance(record, dict) else None

    def save(self, record: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix='.session-', suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(orjson.dumps(record))
            os.replace(tmp_path, self.path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
