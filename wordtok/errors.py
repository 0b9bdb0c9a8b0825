"""
Error Types
===========
Exceptions raised by the tokenizer core and its command line front-ends.
"""


class InvalidVocabulary(ValueError):
    """Vocabulary data could not be parsed or violates the vocabulary invariants.

    Raised by import/load. The tokenizer keeps its previous vocabulary.
    """


class EmptyInput(ValueError):
    """Caller supplied nothing to work on (no text to encode, no ids to decode)."""
