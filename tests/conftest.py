import pytest

from wordtok.tokenizer import DynamicTokenizer


@pytest.fixture
def tokenizer():
    return DynamicTokenizer()


@pytest.fixture
def check_bijection():
    """Assert token_to_id / id_to_token are exact inverses with dense ids."""
    def check(tok):
        vocab = tok.vocab
        assert len(vocab.token_to_id) == len(vocab.id_to_token) == vocab.size
        for token, idx in vocab.token_to_id.items():
            assert vocab.id_to_token[idx] == token
        assert sorted(vocab.id_to_token) == list(range(vocab.size))
    return check
