import pytest

from wordtok import DynamicTokenizer
from wordtok.cli import main, parse_ids, require_text
from wordtok.errors import EmptyInput
from wordtok.store import VocabStore
from wordtok.tokenizer import train_vocab


@pytest.fixture
def store_dir(tmp_path):
    return str(tmp_path / "store")


def run(store_dir, *argv):
    return main(["--store", store_dir, *argv])


def test_parse_ids():
    assert parse_ids("0,1, 2 x 33") == [0, 1, 2, 33]
    assert parse_ids("none") == []
    assert parse_ids("") == []


def test_require_text_rejects_blank():
    with pytest.raises(EmptyInput):
        require_text("   ")


def test_train_encode_decode(store_dir, capsys):
    assert run(store_dir, "train", "--text", "Hello world") == 0
    capsys.readouterr()

    assert run(store_dir, "encode", "--text", "Hello world", "--bos", "--eos") == 0
    assert "[2, 4, 5, 3]" in capsys.readouterr().out

    assert run(store_dir, "decode", "--ids", "2,4,5,3") == 0
    assert capsys.readouterr().out.strip() == "hello world"


def test_encode_writes_learned_tokens_back(store_dir):
    assert run(store_dir, "encode", "--text", "brand new") == 0
    tok = DynamicTokenizer()
    VocabStore(store_dir).load(tok)
    assert tok.vocab.token_to_id["new"] == 5


def test_empty_inputs_fail(store_dir, capsys):
    assert run(store_dir, "encode", "--text", "  ") == 1
    assert run(store_dir, "decode", "--ids", "no ids") == 1
    assert "Error" in capsys.readouterr().out


def test_show_reset_delete(store_dir, capsys):
    run(store_dir, "train", "--text", "alpha beta")
    capsys.readouterr()

    assert run(store_dir, "show") == 0
    out = capsys.readouterr().out
    assert "alpha" in out
    assert "(6 tokens, 2 learned)" in out

    assert run(store_dir, "reset") == 0
    run(store_dir, "show")
    assert "(4 tokens, 0 learned)" in capsys.readouterr().out

    assert run(store_dir, "delete") == 0
    assert VocabStore(store_dir).keys() == []


def test_corrupt_store_reports_error(store_dir, capsys):
    run(store_dir, "train", "--text", "x")
    with open(f"{store_dir}/tokenizer_vocab.json", "w") as f:
        f.write("[]")
    assert run(store_dir, "show") == 1
    assert "Error" in capsys.readouterr().out


def test_train_vocab_script(tmp_path):
    src = tmp_path / "corpus.txt"
    src.write_text("b a b\nc b a\n", encoding="utf-8")
    out = str(tmp_path / "tok")

    assert train_vocab.main(["-i", str(src), "-o", out, "--max_vocab", "2", "-q"]) == 0

    tok = DynamicTokenizer.load(out, verbose=False)
    assert tok.vocab_items()[4:] == [(4, "b"), (5, "a")]


def test_train_vocab_missing_input(tmp_path):
    assert train_vocab.main(["-i", str(tmp_path / "missing.txt"), "-q"]) == 1
