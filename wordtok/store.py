"""
Vocabulary Store
================
Keyed on-disk storage for serialized vocabularies.

Each key is one JSON file (<key>.json) in the store directory holding the
persisted three-field vocabulary shape.

Usage:
    from wordtok.store import VocabStore
    store = VocabStore("data/vocab_store")
    store.save(tokenizer)            # key "tokenizer_vocab"
    store.load(tokenizer)
    store.delete()
"""

import os
import re
from typing import List

from wordtok.errors import InvalidVocabulary
from wordtok.tokenizer.dynamic import DynamicTokenizer


DEFAULT_KEY = "tokenizer_vocab"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class VocabStore:
    """Directory of saved vocabularies, addressed by key."""

    def __init__(self, root: str):
        self.root = root

    def _path(self, key: str) -> str:
        if not _KEY_PATTERN.match(key) or key.startswith("."):
            raise ValueError(f"Invalid store key: {key!r}")
        return os.path.join(self.root, f"{key}.json")

    def exists(self, key: str = DEFAULT_KEY) -> bool:
        return os.path.exists(self._path(key))

    def keys(self) -> List[str]:
        """Saved keys, sorted."""
        if not os.path.isdir(self.root):
            return []
        return sorted(
            name[:-len(".json")] for name in os.listdir(self.root) if name.endswith(".json")
        )

    def save(self, tokenizer: DynamicTokenizer, key: str = DEFAULT_KEY) -> str:
        """
        Write the tokenizer's vocabulary under key.

        Returns:
            The serialized JSON that was written
        """
        path = self._path(key)
        os.makedirs(self.root, exist_ok=True)
        data = tokenizer.to_json()
        # Write then rename so a crash never leaves a half-written entry
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
        print(f"[Store] Saved vocab '{key}' ({tokenizer.vocab_size} tokens) to {path}")
        return data

    def load(self, tokenizer: DynamicTokenizer, key: str = DEFAULT_KEY) -> None:
        """
        Replace the tokenizer's vocabulary with the one stored under key.

        Raises:
            KeyError: nothing stored under key
            InvalidVocabulary: stored data is malformed (tokenizer unchanged)
        """
        path = self._path(key)
        if not os.path.exists(path):
            raise KeyError(f"No vocab found in store under key '{key}'")
        with open(path, "r", encoding="utf-8") as f:
            data = f.read()
        if not data.strip():
            raise InvalidVocabulary(f"Stored vocab '{key}' is empty")
        tokenizer.import_vocab(data)
        print(f"[Store] Loaded vocab '{key}' ({tokenizer.vocab_size} tokens)")

    def delete(self, key: str = DEFAULT_KEY) -> bool:
        """Remove key. Returns False when nothing was stored."""
        path = self._path(key)
        if not os.path.exists(path):
            print(f"[Store] No vocab found under key '{key}'")
            return False
        os.remove(path)
        print(f"[Store] Deleted vocab '{key}'")
        return True

    def __repr__(self) -> str:
        return f"VocabStore(root={self.root!r})"
