"""
Dataset Module
==============
Turn text into stored token ids, and token ids into padded batches.

Key features:
- Binary storage: flat uint32 array of token ids plus a _meta.json file
- Streaming tokenization: encode a file line by line with a progress bar
- Padding: pack variable-length id sequences into a PAD-filled tensor

Usage:
    # Preparing data
    from wordtok.dataset import prepare_dataset
    prepare_dataset("data/raw/input.txt", "data/tokens", tokenizer)

    # Reading it back
    from wordtok.dataset import TokenDataset
    dataset = TokenDataset("data/tokens/train.bin")
    text = tokenizer.decode(dataset.tokens[:50].tolist())

    # Batching
    from wordtok.dataset import pad_batch
    ids, mask = pad_batch(tokenizer.encode_batch(lines), pad_id=tokenizer.pad_id)
"""

import os
import json
import numpy as np
from typing import List, Tuple, Optional, Iterable


# Dynamic vocabularies can outgrow uint16, so ids are stored as uint32
TOKEN_DTYPE = np.uint32
TOKEN_DTYPE_MAX = np.iinfo(TOKEN_DTYPE).max


class TokenDatasetWriter:
    """
    Write token ids to a binary file.

    The file format is a raw array of token ids (uint32).
    Metadata is stored in a separate _meta.json file.
    """

    def __init__(self, output_path: str, dtype=TOKEN_DTYPE):
        """
        Args:
            output_path: Path to output .bin file
            dtype: NumPy dtype for tokens (default: uint32)
        """
        self.output_path = output_path
        self.dtype = dtype
        self.tokens_written = 0

        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        self.file = open(output_path, "wb")

    def add_tokens(self, tokens: List[int]) -> None:
        """Append token ids to the file."""
        if not tokens:
            return
        if max(tokens) > np.iinfo(self.dtype).max or min(tokens) < 0:
            raise ValueError(f"Token ids out of range for {np.dtype(self.dtype).name}")

        arr = np.array(tokens, dtype=self.dtype)
        arr.tofile(self.file)
        self.tokens_written += len(tokens)

    def close(self) -> dict:
        """
        Close the writer and save metadata.

        Returns:
            Metadata dictionary
        """
        self.file.close()

        file_size = os.path.getsize(self.output_path)
        metadata = {
            "num_tokens": self.tokens_written,
            "dtype": np.dtype(self.dtype).name,
            "file_size_bytes": file_size,
        }

        with open(meta_path_for(self.output_path), "w") as f:
            json.dump(metadata, f, indent=2)

        print(f"[Dataset] Wrote {self.tokens_written:,} tokens to {self.output_path}")
        return metadata

    def __enter__(self) -> "TokenDatasetWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.file.closed:
            return
        if exc_type is not None:
            # Partial file: no metadata
            self.file.close()
        else:
            self.close()


def meta_path_for(bin_path: str) -> str:
    root, _ = os.path.splitext(bin_path)
    return root + "_meta.json"


class TokenDataset:
    """Read-only view of a token file, memory-mapped with numpy."""

    def __init__(self, path: str, dtype=TOKEN_DTYPE):
        self.path = path
        self.dtype = dtype

        if os.path.getsize(path) == 0:
            # np.memmap refuses empty files
            self.tokens = np.zeros(0, dtype=dtype)
        else:
            self.tokens = np.memmap(path, dtype=dtype, mode="r")
        self.num_tokens = len(self.tokens)

    def __len__(self) -> int:
        return self.num_tokens

    def __getitem__(self, idx):
        return self.tokens[idx]

    def __repr__(self) -> str:
        return f"TokenDataset(path={self.path!r}, num_tokens={self.num_tokens})"


def prepare_dataset(
    input_path: str,
    output_dir: str,
    tokenizer,
    val_split: float = 0.1,
    add_bos: bool = False,
    add_eos: bool = True,
    max_lines: Optional[int] = None,
    verbose: bool = True
) -> dict:
    """
    Tokenize a text file line by line and write train.bin / val.bin.

    With learn_on_encode enabled, the tokenizer's vocabulary grows as a
    side effect; save it afterwards to keep the ids meaningful.

    Args:
        input_path: Path to input text file
        output_dir: Output directory for train.bin and val.bin
        tokenizer: Tokenizer instance with encode() method
        val_split: Fraction of lines for validation
        add_bos: Add BOS token before each line
        add_eos: Add EOS token after each line
        max_lines: Maximum non-empty lines to process (for testing)
        verbose: Print progress

    Returns:
        Metadata dictionary
    """
    from tqdm import tqdm

    os.makedirs(output_dir, exist_ok=True)

    with open(input_path, "r", encoding="utf-8", errors="replace") as f:
        total_lines = sum(1 for line in f if line.strip())
    if max_lines:
        total_lines = min(total_lines, max_lines)

    val_lines = int(total_lines * val_split)
    train_lines = total_lines - val_lines

    if verbose:
        print(f"[Dataset] Total lines: {total_lines:,}")
        print(f"[Dataset] Train lines: {train_lines:,}")
        print(f"[Dataset] Val lines:   {val_lines:,}")

    vocab_before = tokenizer.vocab_size
    line_count = 0

    with TokenDatasetWriter(os.path.join(output_dir, "train.bin")) as train_writer, \
            TokenDatasetWriter(os.path.join(output_dir, "val.bin")) as val_writer:
        with open(input_path, "r", encoding="utf-8", errors="replace") as f:
            pbar = tqdm(f, desc="Tokenizing", disable=not verbose)
            for line in pbar:
                if line_count >= total_lines:
                    break
                line = line.strip()
                if not line:
                    continue

                tokens = tokenizer.encode(line, add_bos=add_bos, add_eos=add_eos)
                if line_count < train_lines:
                    train_writer.add_tokens(tokens)
                else:
                    val_writer.add_tokens(tokens)
                line_count += 1

        train_meta = train_writer.close()
        val_meta = val_writer.close()

    metadata = {
        "input_file": input_path,
        "vocab_size": tokenizer.vocab_size,
        "vocab_learned": tokenizer.vocab_size - vocab_before,
        "vocab_hash": tokenizer.get_vocab_hash(),
        "total_lines": line_count,
        "train": train_meta,
        "val": val_meta,
    }

    with open(os.path.join(output_dir, "dataset_meta.json"), "w") as f:
        json.dump(metadata, f, indent=2)

    if verbose:
        print(f"[Dataset] Train tokens: {train_meta['num_tokens']:,}")
        print(f"[Dataset] Val tokens:   {val_meta['num_tokens']:,}")
        print(f"[Dataset] Saved to:     {output_dir}/")

    return metadata


# ============================================
# PyTorch Batching Helper
# ============================================

def pad_batch(
    sequences: Iterable[List[int]],
    pad_id: int,
    max_length: Optional[int] = None,
    device: str = "cpu"
) -> Tuple["torch.Tensor", "torch.Tensor"]:
    """
    Right-pad id sequences into one tensor.

    Args:
        sequences: Token id lists of varying length
        pad_id: Id used for padding (the tokenizer's pad_id)
        max_length: Truncate/pad to this length (default: longest sequence)
        device: Target device

    Returns:
        (ids, mask): LongTensors of shape (batch, length); mask is 1 for
        real tokens and 0 for padding
    """
    import torch

    sequences = [list(seq) for seq in sequences]
    if max_length is None:
        max_length = max((len(seq) for seq in sequences), default=0)

    ids = np.full((len(sequences), max_length), pad_id, dtype=np.int64)
    mask = np.zeros((len(sequences), max_length), dtype=np.int64)
    for row, seq in enumerate(sequences):
        seq = seq[:max_length]
        ids[row, :len(seq)] = seq
        mask[row, :len(seq)] = 1

    return (
        torch.tensor(ids, dtype=torch.long, device=device),
        torch.tensor(mask, dtype=torch.long, device=device),
    )


# ============================================
# Example Usage / Self-Test
# ============================================

if __name__ == "__main__":
    import tempfile
    from wordtok.tokenizer import DynamicTokenizer

    print("=== Testing Dataset Module ===\n")

    tokenizer = DynamicTokenizer()

    with tempfile.TemporaryDirectory() as tmpdir:
        test_file = os.path.join(tmpdir, "test.txt")
        with open(test_file, "w") as f:
            for i in range(100):
                f.write(f"This is test line number {i}.\n")

        print("--- Preparing Dataset ---")
        output_dir = os.path.join(tmpdir, "tokens")
        metadata = prepare_dataset(test_file, output_dir, tokenizer, val_split=0.1)

        print("\n--- Reading Back ---")
        dataset = TokenDataset(os.path.join(output_dir, "train.bin"))
        print(dataset)
        print(f"First tokens: {tokenizer.decode(dataset[:8].tolist(), skip_special=False)}")

    print("\n--- Padding ---")
    ids, mask = pad_batch(tokenizer.encode_batch(["short one", "a longer line here"]), tokenizer.pad_id)
    print(f"ids:\n{ids}\nmask:\n{mask}")

    print("\n[OK] Dataset module working correctly!")
