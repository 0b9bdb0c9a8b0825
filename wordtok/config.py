"""
Wordtok Configuration Module
============================
Handles tokenizer and data pipeline configuration.

Usage:
    from wordtok.config import TokenizerConfig, DataConfig
    tok_cfg = TokenizerConfig(lowercase=False)
    data_cfg = DataConfig.from_json("configs/data.json")
"""

from dataclasses import dataclass, field, asdict
from types import MappingProxyType
from typing import Optional, Dict, Any, Mapping
import json
import os


# Logical special-token names, in id order (PAD=0, UNK=1, BOS=2, EOS=3)
SPECIAL_TOKEN_NAMES = ("PAD", "UNK", "BOS", "EOS")

DEFAULT_SPECIAL_TOKENS = {
    "PAD": "[PAD]",
    "UNK": "[UNK]",
    "BOS": "[BOS]",
    "EOS": "[EOS]",
}


# ============================================
# Tokenizer Configuration
# ============================================

@dataclass(frozen=True)
class TokenizerConfig:
    """
    Tokenizer Configuration (immutable once built).

    Attributes:
        lowercase: Case-fold all input before tokenizing
        learn_on_encode: Add unknown tokens to the vocabulary during encode
            (otherwise they map to UNK)
        special_tokens: Logical name (PAD/UNK/BOS/EOS) -> surface string.
            Partial overrides are merged with the defaults.
    """
    lowercase: bool = True
    learn_on_encode: bool = True
    special_tokens: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_SPECIAL_TOKENS)
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        unknown = set(self.special_tokens) - set(SPECIAL_TOKEN_NAMES)
        if unknown:
            raise ValueError(
                f"Unknown special token names: {sorted(unknown)}. "
                f"Available: {list(SPECIAL_TOKEN_NAMES)}"
            )

        merged = dict(DEFAULT_SPECIAL_TOKENS)
        merged.update(self.special_tokens)
        for name in SPECIAL_TOKEN_NAMES:
            surface = merged[name]
            if not isinstance(surface, str) or not surface:
                raise ValueError(f"Special token {name} must be a non-empty string, got {surface!r}")
        if len(set(merged.values())) != len(merged):
            raise ValueError(f"Special token surfaces must be distinct: {merged}")

        # Keep the fixed PAD/UNK/BOS/EOS order regardless of caller order
        ordered = {name: merged[name] for name in SPECIAL_TOKEN_NAMES}
        object.__setattr__(self, "special_tokens", MappingProxyType(ordered))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenizerConfig":
        """Build from a plain dict, ignoring unrelated keys."""
        return cls(
            lowercase=bool(data.get("lowercase", True)),
            learn_on_encode=bool(data.get("learn_on_encode", True)),
            special_tokens=dict(data.get("special_tokens") or {}),
        )

    @classmethod
    def from_json(cls, path: str) -> "TokenizerConfig":
        """Load configuration from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, path: str) -> None:
        """Save configuration to JSON file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "lowercase": self.lowercase,
            "learn_on_encode": self.learn_on_encode,
            "special_tokens": dict(self.special_tokens),
        }

    @property
    def special_surfaces(self) -> frozenset:
        """All special-token surface strings."""
        return frozenset(self.special_tokens.values())


# ============================================
# Data Configuration
# ============================================

@dataclass
class DataConfig:
    """
    Data pipeline Configuration.

    Attributes:
        raw_data_path: Path to raw text file
        tokenizer_dir: Directory for tokenizer files (config.json, vocab.json)
        output_dir: Directory for encoded token files
        max_vocab: Cap on non-special vocabulary entries (None for unbounded)
        val_split: Fraction of lines held out for validation
        add_bos: Prepend BOS to every encoded line
        add_eos: Append EOS to every encoded line
        max_lines: Maximum lines to process (None for all)
    """
    raw_data_path: str = "data/raw/input.txt"
    tokenizer_dir: str = "data/tokenizer"
    output_dir: str = "data/tokens"
    max_vocab: Optional[int] = None
    val_split: float = 0.1
    add_bos: bool = False
    add_eos: bool = True
    max_lines: Optional[int] = None

    def __post_init__(self):
        if not 0.0 <= self.val_split < 1.0:
            raise ValueError(f"val_split must be in [0, 1), got {self.val_split}")
        if self.max_vocab is not None and self.max_vocab < 0:
            raise ValueError(f"max_vocab must be non-negative, got {self.max_vocab}")

    @classmethod
    def from_json(cls, path: str) -> "DataConfig":
        """Load configuration from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(**data)

    def to_json(self, path: str) -> None:
        """Save configuration to JSON file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ============================================
# Example Usage / Self-Test
# ============================================

if __name__ == "__main__":
    print("=== Testing TokenizerConfig ===")
    cfg = TokenizerConfig()
    print(f"Default config: {cfg}")

    custom = TokenizerConfig(lowercase=False, special_tokens={"UNK": "<unk>"})
    print(f"Custom config:  {custom}")

    try:
        TokenizerConfig(special_tokens={"PAD": "[X]", "UNK": "[X]"})
    except ValueError as e:
        print(f"Rejected duplicate surfaces: {e}")

    print("\n=== Testing DataConfig ===")
    data_cfg = DataConfig()
    print(f"Default data config: {data_cfg}")

    print("\n[OK] Config module working correctly!")
