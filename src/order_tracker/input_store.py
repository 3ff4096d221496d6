"""
Input Store for the Order Tracker
Remembers the last order code entered, keyed by a storage key, in a small
JSON file so the next session can restore it.
"""
import json
from pathlib import Path
from typing import Dict, Optional

from . import tracker_config as cfg


class InputStore:
    """Key/value persistence of the last entered order code"""

    def __init__(self, storage_file: Optional[str] = None, storage_key: Optional[str] = None):
        """
        Args:
            storage_file: JSON file holding all stored keys
            storage_key: Key under which the last input is kept
        """
        self.storage_file = Path(storage_file or cfg.STORAGE_FILE)
        self.storage_key = storage_key or cfg.STORAGE_KEY

    def save(self, value: str) -> str:
        """Store the trimmed value and return it"""
        text = str(value or "").strip()
        data = self._read()
        data[self.storage_key] = text
        self.storage_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.storage_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        return text

    def restore(self) -> str:
        """Last stored value, or "" when nothing usable is stored"""
        value = self._read().get(self.storage_key, "")
        return value if isinstance(value, str) else ""

    def clear(self) -> None:
        data = self._read()
        if self.storage_key in data:
            del data[self.storage_key]
            with open(self.storage_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

    def _read(self) -> Dict[str, str]:
        if not self.storage_file.exists():
            return {}
        try:
            with open(self.storage_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}
