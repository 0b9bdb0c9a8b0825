import pytest

from wordtok import DynamicTokenizer, InvalidVocabulary
from wordtok.store import DEFAULT_KEY, VocabStore


@pytest.fixture
def store(tmp_path):
    return VocabStore(str(tmp_path / "store"))


def test_save_load_delete(store):
    tok = DynamicTokenizer()
    tok.train("stored words here")
    store.save(tok)
    assert store.keys() == [DEFAULT_KEY]
    assert store.exists()

    fresh = DynamicTokenizer()
    store.load(fresh)
    assert fresh.export_vocab() == tok.export_vocab()

    assert store.delete() is True
    assert store.delete() is False
    assert store.keys() == []


def test_load_missing_key(store):
    with pytest.raises(KeyError):
        store.load(DynamicTokenizer(), "nothing")


def test_load_corrupt_entry_keeps_tokenizer(store, tmp_path):
    tok = DynamicTokenizer()
    store.save(tok, "broken")
    (tmp_path / "store" / "broken.json").write_text("{truncated", encoding="utf-8")

    tok.train("keep")
    before = tok.export_vocab()
    with pytest.raises(InvalidVocabulary):
        store.load(tok, "broken")
    assert tok.export_vocab() == before


@pytest.mark.parametrize("key", ["../escape", "a/b", "", ".hidden"])
def test_invalid_keys(store, key):
    with pytest.raises(ValueError):
        store.exists(key)


def test_keys_for_missing_root(tmp_path):
    assert VocabStore(str(tmp_path / "nope")).keys() == []


@pytest.mark.parametrize("content", ["", "  \n"])
def test_load_empty_entry_raises(store, tmp_path, content):
    tok = DynamicTokenizer()
    store.save(tok)
    (tmp_path / "store" / f"{DEFAULT_KEY}.json").write_text(content, encoding="utf-8")

    tok.train("keep")
    before = tok.export_vocab()
    with pytest.raises(InvalidVocabulary, match="empty"):
        store.load(tok)
    assert tok.export_vocab() == before
