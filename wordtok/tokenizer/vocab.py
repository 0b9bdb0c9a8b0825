"""
Vocabulary
==========
Bidirectional token <-> id mapping with a reserved block of special tokens.

Invariants:
- token_to_id and id_to_token are exact inverses
- ids are dense, assigned in increasing order starting at 0, never reused
- PAD, UNK, BOS, EOS always hold ids 0-3 after a reset

Persisted shape (JSON):
    {
        "tokenToId": {"[PAD]": 0, ...},
        "idToToken": {"0": "[PAD]", ...},
        "specialTokenIds": {"PAD": 0, ...}
    }
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple, Union

from wordtok.config import SPECIAL_TOKEN_NAMES
from wordtok.errors import InvalidVocabulary


_ID_KEY = re.compile(r"^(0|[1-9][0-9]*)$")

# Persisted field name -> accepted aliases
_FIELDS = {
    "tokenToId": ("tokenToId", "token_to_id"),
    "idToToken": ("idToToken", "id_to_token"),
    "specialTokenIds": ("specialTokenIds", "special_ids"),
}


@dataclass
class VocabSnapshot:
    """
    Independent copy of a vocabulary's state.

    Mutating a snapshot never touches the live vocabulary it came from.

    Attributes:
        token_to_id: token -> id
        id_to_token: id -> token
        special_ids: logical name (PAD/UNK/BOS/EOS) -> id
    """
    token_to_id: Dict[str, int] = field(default_factory=dict)
    id_to_token: Dict[int, str] = field(default_factory=dict)
    special_ids: Dict[str, int] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.id_to_token)

    def to_dict(self) -> Dict[str, Any]:
        """Persisted three-field shape (JSON object keys are strings)."""
        return {
            "tokenToId": dict(self.token_to_id),
            "idToToken": {str(idx): tok for idx, tok in self.id_to_token.items()},
            "specialTokenIds": dict(self.special_ids),
        }

    def to_json(self, indent: int = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VocabSnapshot":
        return parse_snapshot(data)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "VocabSnapshot":
        return parse_snapshot(text)


# ========================================
# Validation
# ========================================

def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _get_field(data: Dict[str, Any], name: str):
    for key in _FIELDS[name]:
        if key in data:
            return data[key]
    raise InvalidVocabulary(f"Missing field '{name}'")


def _parse_id_key(key) -> int:
    if _is_int(key) and key >= 0:
        return key
    if isinstance(key, str) and _ID_KEY.match(key):
        return int(key)
    raise InvalidVocabulary(f"idToToken key {key!r} is not a non-negative integer")


def parse_snapshot(data) -> VocabSnapshot:
    """
    Parse and validate vocabulary data.

    Args:
        data: VocabSnapshot, dict in the persisted shape, or its JSON text

    Returns:
        A fresh VocabSnapshot (never aliases the input)

    Raises:
        InvalidVocabulary: unparsable JSON, wrong shape, or broken invariants
    """
    if isinstance(data, VocabSnapshot):
        data = data.to_dict()
    elif isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidVocabulary(f"Vocabulary is not valid UTF-8: {e}") from e

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidVocabulary(f"Invalid JSON for vocab: {e}") from e

    if not isinstance(data, dict):
        raise InvalidVocabulary(f"Vocabulary must be an object, got {type(data).__name__}")

    raw_t2i = _get_field(data, "tokenToId")
    raw_i2t = _get_field(data, "idToToken")
    raw_special = _get_field(data, "specialTokenIds")
    for name, value in (("tokenToId", raw_t2i), ("idToToken", raw_i2t), ("specialTokenIds", raw_special)):
        if not isinstance(value, dict):
            raise InvalidVocabulary(f"'{name}' must be an object, got {type(value).__name__}")

    token_to_id: Dict[str, int] = {}
    for token, idx in raw_t2i.items():
        if not isinstance(token, str):
            raise InvalidVocabulary(f"tokenToId key {token!r} is not a string")
        if not _is_int(idx) or idx < 0:
            raise InvalidVocabulary(f"tokenToId[{token!r}] = {idx!r} is not a non-negative integer")
        token_to_id[token] = idx

    id_to_token: Dict[int, str] = {}
    for key, token in raw_i2t.items():
        idx = _parse_id_key(key)
        if not isinstance(token, str):
            raise InvalidVocabulary(f"idToToken[{key!r}] = {token!r} is not a string")
        if idx in id_to_token:
            raise InvalidVocabulary(f"Duplicate id {idx} in idToToken")
        id_to_token[idx] = token

    # Bijection: same size and each side maps back onto the other
    if len(token_to_id) != len(id_to_token):
        raise InvalidVocabulary(
            f"tokenToId has {len(token_to_id)} entries but idToToken has {len(id_to_token)}"
        )
    for token, idx in token_to_id.items():
        if id_to_token.get(idx) != token:
            raise InvalidVocabulary(f"tokenToId[{token!r}] = {idx} has no matching idToToken entry")

    # Dense ids, so the next assigned id (== size) never collides
    if set(id_to_token) != set(range(len(id_to_token))):
        raise InvalidVocabulary("Token ids must be dense, starting at 0")

    if set(raw_special) != set(SPECIAL_TOKEN_NAMES):
        raise InvalidVocabulary(
            f"specialTokenIds must name exactly {list(SPECIAL_TOKEN_NAMES)}, got {sorted(raw_special)}"
        )
    special_ids: Dict[str, int] = {}
    for name in SPECIAL_TOKEN_NAMES:
        idx = raw_special[name]
        if not _is_int(idx) or idx not in id_to_token:
            raise InvalidVocabulary(f"specialTokenIds[{name!r}] = {idx!r} is not an assigned id")
        special_ids[name] = idx
    if len(set(special_ids.values())) != len(special_ids):
        raise InvalidVocabulary(f"Special token ids must be distinct: {special_ids}")

    return VocabSnapshot(token_to_id=token_to_id, id_to_token=id_to_token, special_ids=special_ids)


# ========================================
# Live vocabulary
# ========================================

class Vocabulary:
    """
    Growable token <-> id mapping.

    Attributes:
        special_tokens: logical name -> surface string (fixed at construction)
        token_to_id: Dict mapping token -> id
        id_to_token: Dict mapping id -> token
        special_ids: Dict mapping logical name -> id
    """

    def __init__(self, special_tokens: Dict[str, str]):
        self.special_tokens: Dict[str, str] = {
            name: special_tokens[name] for name in SPECIAL_TOKEN_NAMES
        }
        self.token_to_id: Dict[str, int] = {}
        self.id_to_token: Dict[int, str] = {}
        self.special_ids: Dict[str, int] = {}
        self.reset()

    def reset(self) -> None:
        """Drop every token, then reserve ids 0-3 for PAD, UNK, BOS, EOS."""
        self.token_to_id = {}
        self.id_to_token = {}
        self.special_ids = {}
        for name in SPECIAL_TOKEN_NAMES:
            self.special_ids[name] = self.add(self.special_tokens[name])

    def add(self, token: str) -> int:
        """Return the id of token, assigning the next id if it is new."""
        idx = self.token_to_id.get(token)
        if idx is not None:
            return idx
        idx = self.size
        self.token_to_id[token] = idx
        self.id_to_token[idx] = token
        return idx

    @property
    def size(self) -> int:
        """Number of tokens, which is also the next id to be assigned."""
        return len(self.id_to_token)

    @property
    def num_special(self) -> int:
        return len(self.special_ids)

    @property
    def num_regular(self) -> int:
        """Number of non-special tokens."""
        return self.size - self.num_special

    def snapshot(self) -> VocabSnapshot:
        return VocabSnapshot(
            token_to_id=dict(self.token_to_id),
            id_to_token=dict(self.id_to_token),
            special_ids=dict(self.special_ids),
        )

    def replace_from(self, snapshot: VocabSnapshot) -> None:
        """Overwrite all three mappings from an already validated snapshot."""
        self.token_to_id = dict(snapshot.token_to_id)
        self.id_to_token = dict(snapshot.id_to_token)
        self.special_ids = dict(snapshot.special_ids)

    def items(self) -> List[Tuple[int, str]]:
        """(id, token) pairs sorted by id."""
        return sorted(self.id_to_token.items())

    def __len__(self) -> int:
        return self.size

    def __contains__(self, token) -> bool:
        return token in self.token_to_id

    def __iter__(self) -> Iterator[str]:
        return iter(token for _, token in self.items())

    def __repr__(self) -> str:
        return f"Vocabulary(size={self.size}, special={self.special_ids})"
