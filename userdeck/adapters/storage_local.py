from __future__ import annotations
import json, os, tempfile
from typing import Any, Dict, Optional
from userdeck.domain.ports import BlobStoragePort, SeedStoragePort, SettingsStoragePort


class StorageLocal(BlobStoragePort, SeedStoragePort, SettingsStoragePort):
    """Local filesystem key-value storage (one JSON file per key)."""

    SEED_KEY = "seed"
    SETTINGS_KEY = "user_settings"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    def _path(self, key: str) -> str:
        if not key or os.sep in key or (os.altsep and os.altsep in key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.root, f"{key}.json")

    # ---- Blobs ----
    def read_blob(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def write_blob(self, key: str, text: str) -> None:
        path = self._path(key)
        os.makedirs(self.root, exist_ok=True)
        # write to a sibling temp file, then swap it in as a unit
        fd, tmp_path = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.root)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def delete_blob(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)

    # ---- Pagination seed (JSON string) ----
    def load_seed(self) -> Optional[str]:
        text = self.read_blob(self.SEED_KEY)
        if not text:
            return None
        try:
            value = json.loads(text)
        except ValueError:
            return None
        return value if isinstance(value, str) and value else None

    def save_seed(self, seed: str) -> None:
        self.write_blob(self.SEED_KEY, json.dumps(seed))

    def clear_seed(self) -> None:
        self.delete_blob(self.SEED_KEY)

    # ---- User settings (JSON) ----
    def save_user_settings(self, payload: Dict[str, Any]) -> None:
        self.write_blob(self.SETTINGS_KEY, json.dumps(payload, ensure_ascii=False, indent=2))

    def load_user_settings(self) -> Optional[Dict[str, Any]]:
        text = self.read_blob(self.SETTINGS_KEY)
        if text is None:
            return None
        data = json.loads(text)
        return data if isinstance(data, dict) else None
