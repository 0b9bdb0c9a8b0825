import json

import pytest

from wordtok.config import DEFAULT_SPECIAL_TOKENS
from wordtok.errors import InvalidVocabulary
from wordtok.tokenizer.vocab import Vocabulary, VocabSnapshot, parse_snapshot


def make_vocab(*tokens):
    vocab = Vocabulary(DEFAULT_SPECIAL_TOKENS)
    for tok in tokens:
        vocab.add(tok)
    return vocab


def test_reset_reserves_special_ids():
    vocab = make_vocab("x")
    vocab.reset()
    assert vocab.size == 4
    assert vocab.special_ids == {"PAD": 0, "UNK": 1, "BOS": 2, "EOS": 3}
    assert vocab.num_regular == 0


def test_add_is_dense_and_stable():
    vocab = make_vocab()
    assert vocab.add("a") == 4
    assert vocab.add("b") == 5
    assert vocab.add("a") == 4
    assert len(vocab) == 6
    assert "b" in vocab
    assert list(vocab)[4:] == ["a", "b"]


def test_snapshot_to_dict_uses_persisted_shape():
    data = make_vocab("hi").snapshot().to_dict()
    assert set(data) == {"tokenToId", "idToToken", "specialTokenIds"}
    assert data["idToToken"]["4"] == "hi"
    assert data["tokenToId"]["hi"] == 4
    assert data["specialTokenIds"] == {"PAD": 0, "UNK": 1, "BOS": 2, "EOS": 3}


def test_parse_json_text_and_bytes():
    text = make_vocab("hi").snapshot().to_json()
    assert parse_snapshot(text).id_to_token[4] == "hi"
    assert parse_snapshot(text.encode("utf-8")).size == 5
    assert VocabSnapshot.from_json(text) == parse_snapshot(text)


def test_parse_accepts_snake_case_and_extra_keys():
    snap = make_vocab("hi").snapshot()
    data = {
        "version": 2,
        "token_to_id": snap.token_to_id,
        "id_to_token": snap.id_to_token,
        "special_ids": snap.special_ids,
    }
    assert parse_snapshot(data) == snap


def test_parse_does_not_alias_input():
    snap = make_vocab("hi").snapshot()
    parsed = parse_snapshot(snap)
    parsed.token_to_id["other"] = 9
    assert "other" not in snap.token_to_id


def _persisted(**overrides):
    data = make_vocab("hi").snapshot().to_dict()
    data.update(overrides)
    return data


@pytest.mark.parametrize("data", [
    42,
    _persisted(tokenToId=[]),
    _persisted(tokenToId={"[PAD]": 0, "[UNK]": 1, "[BOS]": 2, "[EOS]": 3, "hi": True}),
    _persisted(tokenToId={"[PAD]": 0, "[UNK]": 1, "[BOS]": 2, "[EOS]": 3, "hi": 5}),
    _persisted(idToToken={"0": "[PAD]", "1": "[UNK]", "2": "[BOS]", "3": "[EOS]", "04": "hi"}),
    _persisted(idToToken={"0": "[PAD]", "1": "[UNK]", "2": "[BOS]", "3": "[EOS]", "4": 7}),
    _persisted(specialTokenIds={"PAD": 0, "UNK": 1, "BOS": 2, "EOS": 2}),
    _persisted(specialTokenIds={"PAD": 0, "UNK": 1, "BOS": 2, "EOS": 99}),
    _persisted(specialTokenIds={"PAD": 0, "UNK": 1, "BOS": 2}),
])
def test_parse_rejects_malformed(data):
    with pytest.raises(InvalidVocabulary):
        parse_snapshot(data)


def test_parse_rejects_id_gaps():
    data = {
        "tokenToId": {"[PAD]": 0, "[UNK]": 1, "[BOS]": 2, "[EOS]": 3, "hi": 7},
        "idToToken": {"0": "[PAD]", "1": "[UNK]", "2": "[BOS]", "3": "[EOS]", "7": "hi"},
        "specialTokenIds": {"PAD": 0, "UNK": 1, "BOS": 2, "EOS": 3},
    }
    with pytest.raises(InvalidVocabulary, match="dense"):
        parse_snapshot(json.dumps(data))


def test_parse_chains_json_error():
    with pytest.raises(InvalidVocabulary) as excinfo:
        parse_snapshot("{oops")
    assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)


def test_replace_from_copies():
    snap = make_vocab("a", "b").snapshot()
    vocab = make_vocab()
    vocab.replace_from(snap)
    snap.token_to_id.clear()
    assert vocab.size == 6
    assert vocab.token_to_id["b"] == 5
