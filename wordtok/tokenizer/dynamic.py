"""
Dynamic-Vocabulary Tokenizer
============================
A word-level tokenizer whose vocabulary grows from the text it sees.

Key concepts:
- Tokens: maximal runs of word characters and apostrophes, or any single
  other non-whitespace character. Whitespace only separates.
- Special tokens: PAD, UNK, BOS, EOS always hold ids 0-3
- Training: new tokens are added most-frequent-first, optionally capped
- Learn-on-encode: unknown tokens met while encoding get fresh ids
  (or map to UNK when disabled)

Usage:
    # Training
    tokenizer = DynamicTokenizer()
    tokenizer.train("Hello world. Hello again!", max_vocab=200)
    tokenizer.save("data/tokenizer")

    # Loading and using
    tokenizer = DynamicTokenizer.load("data/tokenizer")
    ids = tokenizer.encode("Hello, world!", add_bos=True, add_eos=True)
    text = tokenizer.decode(ids)
"""

import os
import re
import json
import hashlib
import threading
from collections import Counter
from typing import List, Dict, Tuple, Optional, Iterable

from tqdm import tqdm

from wordtok.config import TokenizerConfig
from wordtok.errors import InvalidVocabulary
from wordtok.tokenizer.vocab import Vocabulary, VocabSnapshot, parse_snapshot


# Words (including contractions) or a single non-space, non-word character
TOKEN_PATTERN = re.compile(r"[\w']+|[^\s\w]")

# Space before closing punctuation is dropped when decoding ("hello ." -> "hello.")
_PUNCT_SPACE = re.compile(r"\s([.,!?;:])")

CONFIG_FILE = "config.json"
VOCAB_FILE = "vocab.json"


def split_tokens(text: str, lowercase: bool = False) -> List[str]:
    """
    Segment text into tokens.

    Case-folding is applied to the whole string before segmentation.
    """
    if not text:
        return []
    if lowercase:
        text = text.lower()
    return TOKEN_PATTERN.findall(text)


class DynamicTokenizer:
    """
    Word-level tokenizer with an incrementally built vocabulary.

    All vocabulary access is serialized by one re-entrant lock, so a
    tokenizer shared between threads behaves as if driven by one caller.

    Attributes:
        config: Immutable TokenizerConfig
        vocab: Live Vocabulary (token <-> id)
    """

    def __init__(self, config: Optional[TokenizerConfig] = None, **kwargs):
        """
        Args:
            config: TokenizerConfig; built from kwargs when omitted
            **kwargs: lowercase, learn_on_encode, special_tokens
        """
        if config is None:
            config = TokenizerConfig(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a TokenizerConfig or keyword options, not both")
        self.config = config
        self._lock = threading.RLock()
        self.vocab = Vocabulary(config.special_tokens)

    @property
    def lowercase(self) -> bool:
        return self.config.lowercase

    @property
    def learn_on_encode(self) -> bool:
        return self.config.learn_on_encode

    @property
    def special_tokens(self) -> Dict[str, str]:
        return dict(self.config.special_tokens)

    @property
    def special_ids(self) -> Dict[str, int]:
        with self._lock:
            return dict(self.vocab.special_ids)

    @property
    def vocab_size(self) -> int:
        """Total vocabulary size (special + learned)."""
        with self._lock:
            return self.vocab.size

    @property
    def num_special(self) -> int:
        return len(self.config.special_tokens)

    @property
    def pad_id(self) -> int:
        return self.vocab.special_ids["PAD"]

    @property
    def unk_id(self) -> int:
        return self.vocab.special_ids["UNK"]

    @property
    def bos_id(self) -> int:
        return self.vocab.special_ids["BOS"]

    @property
    def eos_id(self) -> int:
        return self.vocab.special_ids["EOS"]

    def tokenize(self, text: str) -> List[str]:
        """Split text into tokens using this tokenizer's case-folding setting."""
        return split_tokens(text, lowercase=self.lowercase)

    # ========================================
    # Reset
    # ========================================

    def reset(self) -> None:
        """Discard all learned tokens. Ids issued before the reset are no longer valid."""
        with self._lock:
            self.vocab.reset()

    # ========================================
    # Training
    # ========================================

    def train(
        self,
        text: str,
        max_vocab: Optional[int] = None,
        append: bool = False,
        verbose: bool = False
    ) -> None:
        """
        Learn vocabulary from text.

        Args:
            text: Training text (may be empty)
            max_vocab: Cap on non-special tokens in the vocabulary (None = unbounded)
            append: Keep the existing vocabulary instead of resetting first
            verbose: Print progress
        """
        if max_vocab is not None and max_vocab < 0:
            raise ValueError(f"max_vocab must be non-negative, got {max_vocab}")

        with self._lock:
            if not append:
                self.vocab.reset()
            if not text:
                return

            freqs = Counter(self.tokenize(text))
            added = self._add_by_frequency(freqs, max_vocab)

            if verbose:
                print(f"[Tokenizer] Counted {sum(freqs.values()):,} tokens, {len(freqs):,} distinct")
                print(f"[Tokenizer] Added {added:,} new tokens, vocab size: {self.vocab.size:,}")

    def _add_by_frequency(self, freqs: Counter, max_vocab: Optional[int]) -> int:
        """
        Add tokens most-frequent-first until the cap is hit.

        Counter keeps first-occurrence order and sorted() is stable, so
        equal-frequency tokens are added in the order they first appeared.
        """
        ranked = sorted(freqs.items(), key=lambda item: item[1], reverse=True)
        added = 0
        for token, _ in ranked:
            if max_vocab is not None and self.vocab.num_regular >= max_vocab:
                break
            if token not in self.vocab:
                self.vocab.add(token)
                added += 1
        return added

    def train_from_file(
        self,
        path: str,
        max_vocab: Optional[int] = None,
        append: bool = False,
        verbose: bool = True
    ) -> None:
        """
        Train on a text file, counting frequencies over the whole file.

        Args:
            path: Path to text file
            max_vocab: Cap on non-special tokens
            append: Keep the existing vocabulary
            verbose: Show a progress bar
        """
        if max_vocab is not None and max_vocab < 0:
            raise ValueError(f"max_vocab must be non-negative, got {max_vocab}")

        freqs: Counter = Counter()
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in tqdm(f, desc="Counting tokens", unit=" lines", disable=not verbose):
                freqs.update(self.tokenize(line))

        with self._lock:
            if not append:
                self.vocab.reset()
            added = self._add_by_frequency(freqs, max_vocab)

        if verbose:
            print(f"[Tokenizer] {path}: {sum(freqs.values()):,} tokens, {len(freqs):,} distinct")
            print(f"[Tokenizer] Added {added:,} new tokens, vocab size: {self.vocab_size:,}")

    # ========================================
    # Encoding
    # ========================================

    def encode(self, text: str, add_bos: bool = False, add_eos: bool = False) -> List[int]:
        """
        Encode text to token IDs.

        With learn_on_encode, unknown tokens are added to the vocabulary;
        otherwise they encode as UNK.

        Args:
            text: Input text string
            add_bos: Prepend BOS token
            add_eos: Append EOS token

        Returns:
            List of token IDs (empty for empty text, even with add_bos/add_eos)
        """
        if not text:
            return []

        tokens = self.tokenize(text)
        with self._lock:
            ids = []
            if add_bos:
                ids.append(self.bos_id)
            for token in tokens:
                idx = self.vocab.token_to_id.get(token)
                if idx is None:
                    idx = self.vocab.add(token) if self.learn_on_encode else self.unk_id
                ids.append(idx)
            if add_eos:
                ids.append(self.eos_id)
        return ids

    def encode_batch(self, texts: Iterable[str], **kwargs) -> List[List[int]]:
        """Encode multiple texts."""
        return [self.encode(text, **kwargs) for text in texts]

    # ========================================
    # Decoding
    # ========================================

    def convert_ids_to_tokens(self, ids: Iterable[int]) -> List[str]:
        """Map ids to tokens; unassigned ids become the UNK surface string."""
        unk = self.config.special_tokens["UNK"]
        with self._lock:
            return [self.vocab.id_to_token.get(idx, unk) for idx in ids]

    def decode(self, ids: Iterable[int], skip_special: bool = True) -> str:
        """
        Decode token IDs back to text.

        Tokens are joined with single spaces, then the space before
        . , ! ? ; : is removed.

        Args:
            ids: Token IDs (unassigned ids decode as UNK, never raise)
            skip_special: Drop PAD/UNK/BOS/EOS from the output

        Returns:
            Decoded text string
        """
        tokens = self.convert_ids_to_tokens(ids)
        if skip_special:
            specials = self.config.special_surfaces
            tokens = [tok for tok in tokens if tok not in specials]
        return _PUNCT_SPACE.sub(r"\1", " ".join(tokens))

    def decode_batch(self, batch_ids: Iterable[List[int]], **kwargs) -> List[str]:
        """Decode multiple sequences."""
        return [self.decode(ids, **kwargs) for ids in batch_ids]

    # ========================================
    # Export / Import
    # ========================================

    def export_vocab(self) -> VocabSnapshot:
        """Independent copy of the current vocabulary."""
        with self._lock:
            return self.vocab.snapshot()

    def import_vocab(self, data) -> None:
        """
        Replace the vocabulary wholesale.

        Args:
            data: VocabSnapshot, dict in the persisted shape, or JSON text.
                None or an empty string is ignored.

        Raises:
            InvalidVocabulary: data is malformed; the current vocabulary is kept
        """
        if data is None or (isinstance(data, (str, bytes)) and not data):
            return
        snapshot = parse_snapshot(data)
        for name, idx in snapshot.special_ids.items():
            surface = self.config.special_tokens[name]
            if snapshot.id_to_token[idx] != surface:
                raise InvalidVocabulary(
                    f"Special token {name} is {snapshot.id_to_token[idx]!r} in vocab "
                    f"but {surface!r} in config"
                )
        with self._lock:
            self.vocab.replace_from(snapshot)

    def to_json(self, indent: int = None) -> str:
        """Serialize the vocabulary in the persisted three-field shape."""
        return self.export_vocab().to_json(indent=indent)

    # ========================================
    # Save / Load
    # ========================================

    def save(self, path: str, verbose: bool = True) -> None:
        """
        Save tokenizer to directory.

        Saves:
            - config.json: TokenizerConfig
            - vocab.json: Vocabulary in the persisted three-field shape
        """
        os.makedirs(path, exist_ok=True)
        self.config.to_json(os.path.join(path, CONFIG_FILE))
        with open(os.path.join(path, VOCAB_FILE), "w", encoding="utf-8") as f:
            f.write(self.to_json(indent=2))
        if verbose:
            print(f"[Tokenizer] Saved to {path}/ (vocab_size={self.vocab_size})")

    @classmethod
    def load(cls, path: str, verbose: bool = True) -> "DynamicTokenizer":
        """
        Load tokenizer from directory.

        Args:
            path: Directory containing vocab.json and (optionally) config.json

        Returns:
            Loaded tokenizer

        Raises:
            InvalidVocabulary: vocab.json is malformed
        """
        config_path = os.path.join(path, CONFIG_FILE)
        if os.path.exists(config_path):
            config = TokenizerConfig.from_json(config_path)
        else:
            config = TokenizerConfig()
        tokenizer = cls(config)

        with open(os.path.join(path, VOCAB_FILE), "r", encoding="utf-8") as f:
            tokenizer.import_vocab(f.read())

        if verbose:
            print(f"[Tokenizer] Loaded from {path}/ (vocab_size={tokenizer.vocab_size})")
        return tokenizer

    def get_vocab_hash(self) -> str:
        """Get a hash of the vocabulary for verification."""
        vocab_str = json.dumps(self.export_vocab().to_dict(), sort_keys=True)
        return hashlib.md5(vocab_str.encode()).hexdigest()[:8]

    # ========================================
    # Utility Methods
    # ========================================

    def get_token_str(self, token_id: int) -> str:
        """Get string representation of a token."""
        return self.convert_ids_to_tokens([token_id])[0]

    def vocab_items(self) -> List[Tuple[int, str]]:
        """(id, token) pairs sorted by id."""
        with self._lock:
            return self.vocab.items()

    def __len__(self) -> int:
        return self.vocab_size

    def __repr__(self) -> str:
        return (
            f"DynamicTokenizer(vocab_size={self.vocab_size}, lowercase={self.lowercase}, "
            f"learn_on_encode={self.learn_on_encode})"
        )


# ============================================
# Example Usage / Self-Test
# ============================================

if __name__ == "__main__":
    print("=== Testing DynamicTokenizer ===\n")

    tokenizer = DynamicTokenizer()
    print(f"Initial vocab size: {tokenizer.vocab_size}")
    print(f"Special tokens: {tokenizer.special_ids}")

    print("\n--- Training ---")
    tokenizer.train("Hello world. Hello, Python! The quick brown fox.", max_vocab=8, verbose=True)
    print(f"Vocab: {tokenizer.vocab_items()}")

    print("\n--- Encoding/Decoding ---")
    test_str = "Hello, world!"
    ids = tokenizer.encode(test_str, add_bos=True, add_eos=True)
    print(f"Original: '{test_str}'")
    print(f"Tokens:   {tokenizer.convert_ids_to_tokens(ids)}")
    print(f"Ids:      {ids}")
    print(f"Decoded (skip special): '{tokenizer.decode(ids)}'")
    print(f"Decoded (keep special): '{tokenizer.decode(ids, skip_special=False)}'")

    print("\n--- Learn on encode ---")
    before = tokenizer.vocab_size
    tokenizer.encode("brand new words")
    print(f"Vocab size {before} -> {tokenizer.vocab_size}")

    print("\n--- Save/Load ---")
    import tempfile
    with tempfile.TemporaryDirectory() as tmpdir:
        tokenizer.save(tmpdir)
        loaded = DynamicTokenizer.load(tmpdir)
        print(f"Hash match: {tokenizer.get_vocab_hash() == loaded.get_vocab_hash()}")

    print("\n[OK] DynamicTokenizer working correctly!")
