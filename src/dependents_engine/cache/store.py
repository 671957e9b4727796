"""Key/value stores holding one JSON document per key."""

from __future__ import annotations

import copy
import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

# Key of the project list; package names never start with an underscore.
INDEX_KEY = "_index"


class CacheMiss(KeyError):
    """No usable document is stored under the key."""


class CacheStore(Protocol):
    def get(self, key: str) -> Any:
        """Return the document under *key* or raise CacheMiss."""
        ...

    def put(self, key: str, value: Any) -> None:
        """Replace the document under *key*."""
        ...

    def clear(self) -> None:
        """Drop every document."""
        ...


class DirectoryStore:
    """One ``<key>.json`` file per key inside a directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Any:
        path = self.path_for(key)
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise CacheMiss(key) from e

    def put(self, key: str, value: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        # Write a sibling temp file and rename it over the target so a
        # reader never sees half a document.
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2)
                f.write("\n")
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        if self.root.exists():
            shutil.rmtree(self.root)


class MemoryStore:
    """In-process store; documents are copied on the way in and out."""

    def __init__(self, documents: dict[str, Any] | None = None) -> None:
        self.documents: dict[str, Any] = copy.deepcopy(documents or {})

    def get(self, key: str) -> Any:
        if key not in self.documents:
            raise CacheMiss(key)
        return copy.deepcopy(self.documents[key])

    def put(self, key: str, value: Any) -> None:
        self.documents[key] = copy.deepcopy(value)

    def clear(self) -> None:
        self.documents.clear()
