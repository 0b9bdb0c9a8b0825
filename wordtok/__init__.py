"""Wordtok: a dynamic-vocabulary word-level tokenizer."""

from wordtok.config import TokenizerConfig, DataConfig
from wordtok.errors import InvalidVocabulary, EmptyInput
from wordtok.tokenizer import DynamicTokenizer, Vocabulary, VocabSnapshot

__version__ = "0.1.0"

__all__ = [
    "DynamicTokenizer",
    "Vocabulary",
    "VocabSnapshot",
    "TokenizerConfig",
    "DataConfig",
    "InvalidVocabulary",
    "EmptyInput",
]
