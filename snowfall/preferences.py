"""
Preference Storage - persisted on/off switch for the snow overlay.

Values are stored as the strings "true" / "false". Anything other than
"true" reads back as False; a missing key reads back as None so callers
can fall back to a default.

SECURITY:
- Preference files are created with 0o600 permissions (owner read/write only)
- Preference directory is created with 0o700 permissions (owner access only)
- Writes go through a temp file and os.replace() so a crash never leaves
  a half-written file
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from .utils.error_handling import ErrorCategory, handle_error

logger = logging.getLogger(__name__)

# Secure file permissions
PREFS_FILE_PERMS = 0o600   # Owner read/write only
PREFS_DIR_PERMS = 0o700    # Owner access only

TRUE_VALUE = "true"
FALSE_VALUE = "false"


def encode_bool(value: bool) -> str:
    return TRUE_VALUE if value else FALSE_VALUE


def decode_bool(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    return raw == TRUE_VALUE


class PreferenceStore(ABC):
    """Named boolean preferences."""

    @abstractmethod
    def get_bool(self, key: str) -> Optional[bool]:
        """Stored value for key, or None if never stored."""

    @abstractmethod
    def set_bool(self, key: str, value: bool):
        """
        Persist value under key.

        Raises:
            OSError: if the value cannot be written
        """


class MemoryPreferenceStore(PreferenceStore):
    """Dict-backed store; lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get_bool(self, key: str) -> Optional[bool]:
        return decode_bool(self.values.get(key))

    def set_bool(self, key: str, value: bool):
        self.values[key] = encode_bool(value)


class JsonPreferenceStore(PreferenceStore):
    """Preferences kept in a single JSON object file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            handle_error(e, "read snow preferences", ErrorCategory.PERSISTENCE,
                         additional_context={'path': str(self.path)})
            return {}

        if not isinstance(data, dict):
            handle_error(
                ValueError(f"preference file root is {type(data).__name__}, not an object"),
                "read snow preferences",
                ErrorCategory.PERSISTENCE,
                additional_context={'path': str(self.path)},
            )
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get_bool(self, key: str) -> Optional[bool]:
        with self._lock:
            return decode_bool(self._read().get(key))

    def set_bool(self, key: str, value: bool):
        with self._lock:
            data = self._read()
            data[key] = encode_bool(value)

            directory = self.path.parent
            if not directory.exists():
                directory.mkdir(parents=True, mode=PREFS_DIR_PERMS, exist_ok=True)

            fd, tmp_path = tempfile.mkstemp(prefix='.prefs-', suffix='.tmp', dir=str(directory))
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(data, f, sort_keys=True, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.chmod(tmp_path, PREFS_FILE_PERMS)
                os.replace(tmp_path, self.path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

            logger.debug(f"Stored preference {key}={data[key]} in {self.path}")
