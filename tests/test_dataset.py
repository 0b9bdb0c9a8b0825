import pytest

from wordtok import DynamicTokenizer
from wordtok.dataset import TokenDataset, TokenDatasetWriter, meta_path_for, pad_batch, prepare_dataset


def test_writer_and_reader(tmp_path):
    path = str(tmp_path / "tokens.bin")
    with TokenDatasetWriter(path) as writer:
        writer.add_tokens([4, 5, 6])
        writer.add_tokens([])
        writer.add_tokens([70000])

    dataset = TokenDataset(path)
    assert len(dataset) == 4
    assert dataset[:].tolist() == [4, 5, 6, 70000]
    assert (tmp_path / "tokens_meta.json").exists()
    assert meta_path_for(path).endswith("tokens_meta.json")


def test_writer_rejects_negative_ids(tmp_path):
    with TokenDatasetWriter(str(tmp_path / "bad.bin")) as writer:
        with pytest.raises(ValueError):
            writer.add_tokens([-1])


def test_empty_dataset(tmp_path):
    path = str(tmp_path / "empty.bin")
    TokenDatasetWriter(path).close()
    assert len(TokenDataset(path)) == 0


def test_prepare_dataset_learns_and_splits(tmp_path):
    src = tmp_path / "input.txt"
    src.write_text("".join(f"line number {i}\n\n" for i in range(10)), encoding="utf-8")
    tok = DynamicTokenizer()

    meta = prepare_dataset(str(src), str(tmp_path / "out"), tok, val_split=0.2, verbose=False)

    assert meta["total_lines"] == 10
    assert meta["train"]["num_tokens"] == 8 * 4
    assert meta["val"]["num_tokens"] == 2 * 4
    assert meta["vocab_learned"] == 12
    assert meta["vocab_size"] == tok.vocab_size == 16

    train = TokenDataset(str(tmp_path / "out" / "train.bin"))
    assert train[:4].tolist() == [4, 5, 6, tok.eos_id]
    assert tok.decode(train[:3].tolist()) == "line number 0"


def test_prepare_dataset_max_lines(tmp_path):
    src = tmp_path / "input.txt"
    src.write_text("a\nb\nc\nd\n", encoding="utf-8")
    meta = prepare_dataset(
        str(src), str(tmp_path / "out"), DynamicTokenizer(),
        val_split=0.0, add_eos=False, max_lines=2, verbose=False,
    )
    assert meta["total_lines"] == 2
    assert meta["train"]["num_tokens"] == 2


def test_pad_batch():
    torch = pytest.importorskip("torch")
    ids, mask = pad_batch([[4, 5, 6], [7]], pad_id=0)
    assert ids.dtype == torch.long
    assert ids.tolist() == [[4, 5, 6], [7, 0, 0]]
    assert mask.tolist() == [[1, 1, 1], [1, 0, 0]]


def test_pad_batch_truncates():
    pytest.importorskip("torch")
    ids, mask = pad_batch([[4, 5, 6]], pad_id=0, max_length=2)
    assert ids.tolist() == [[4, 5]]
    assert mask.tolist() == [[1, 1]]


def _load_prepare_script():
    import importlib.util
    from pathlib import Path

    path = Path(__file__).resolve().parent.parent / "scripts" / "prepare_data.py"
    spec = importlib.util.spec_from_file_location("prepare_data", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_clean_text():
    prepare_data = _load_prepare_script()
    assert prepare_data.clean_text("  a  \r\n\n\n\n b\r") == "a\n\nb\n"


def test_prepare_pipeline_saves_grown_tokenizer(tmp_path):
    from wordtok.config import DataConfig, TokenizerConfig

    prepare_data = _load_prepare_script()
    src = tmp_path / "raw.txt"
    src.write_text("the cat\nthe dog\nthe bird\nthe fish\n", encoding="utf-8")
    cfg = DataConfig(
        raw_data_path=str(src),
        tokenizer_dir=str(tmp_path / "tok"),
        output_dir=str(tmp_path / "tokens"),
        max_vocab=2,
        val_split=0.25,
    )

    meta = prepare_data.run(cfg, TokenizerConfig())

    tok = DynamicTokenizer.load(cfg.tokenizer_dir, verbose=False)
    # "the" and "cat" from training, then dog/bird/fish learned while encoding
    assert tok.vocab_size == meta["vocab_size"] == 4 + 5
    assert meta["vocab_learned"] == 3
    assert (tmp_path / "tokens" / "data_config.json").exists()


def test_writer_skips_metadata_when_aborted(tmp_path):
    path = str(tmp_path / "partial.bin")
    with pytest.raises(RuntimeError):
        with TokenDatasetWriter(path) as writer:
            writer.add_tokens([4, 5])
            raise RuntimeError("interrupted")

    assert writer.file.closed
    assert not (tmp_path / "partial_meta.json").exists()
