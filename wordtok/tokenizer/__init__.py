# Wordtok Tokenizer Module
"""
Dynamic-vocabulary word-level tokenizer.

Classes:
    DynamicTokenizer: Main tokenizer class for training/encoding/decoding text.
    Vocabulary: Live token <-> id mapping.
    VocabSnapshot: Independent, serializable copy of a vocabulary.

Usage:
    from wordtok.tokenizer import DynamicTokenizer
    tokenizer = DynamicTokenizer.load("data/tokenizer")
    ids = tokenizer.encode("Hello, world!")
    text = tokenizer.decode(ids)
"""

from .vocab import Vocabulary, VocabSnapshot, parse_snapshot
from .dynamic import DynamicTokenizer, split_tokens

__all__ = ["DynamicTokenizer", "Vocabulary", "VocabSnapshot", "parse_snapshot", "split_tokens"]
