#!/usr/bin/env python3
"""
Data Preparation Script
=======================
Complete data preparation pipeline:
1. Clean raw text
2. Train the vocabulary
3. Encode text to token ids
4. Write binary token files and save the (possibly grown) tokenizer

Usage:
    python scripts/prepare_data.py --input data/raw/input.txt

    # Cap the trained vocabulary
    python scripts/prepare_data.py --input data/raw/input.txt --max_vocab 8192

    # Quick test mode
    python scripts/prepare_data.py --input data/raw/input.txt --max_lines 10000
"""

import os
import re
import sys
import argparse

from wordtok.config import DataConfig, TokenizerConfig
from wordtok.dataset import prepare_dataset
from wordtok.tokenizer import DynamicTokenizer


def clean_text(text: str) -> str:
    """
    Clean raw text for training.

    - Normalize line endings
    - Remove excessive blank lines
    - Strip each line
    """
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = re.sub(r'\n{3,}', '\n\n', text)
    lines = [line.strip() for line in text.split('\n')]
    return '\n'.join(lines)


def clean_file(input_path: str, output_path: str, max_lines: int = None) -> int:
    """
    Clean a text file.

    Returns:
        Number of lines written
    """
    print(f"[Clean] Reading {input_path}...")

    with open(input_path, 'r', encoding='utf-8', errors='replace') as f:
        text = clean_text(f.read())

    if max_lines:
        text = '\n'.join(text.split('\n')[:max_lines])

    os.makedirs(os.path.dirname(output_path) or '.', exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(text)

    line_count = text.count('\n') + 1
    print(f"[Clean] Wrote {line_count:,} lines to {output_path}")
    return line_count


def run(cfg: DataConfig, tok_cfg: TokenizerConfig, skip_clean: bool = False) -> dict:
    """Run the pipeline end to end. Returns the dataset metadata."""
    input_path = cfg.raw_data_path
    if not skip_clean:
        cleaned = os.path.join(cfg.output_dir, "cleaned.txt")
        clean_file(input_path, cleaned, max_lines=cfg.max_lines)
        input_path = cleaned

    tokenizer = DynamicTokenizer(tok_cfg)
    tokenizer.train_from_file(input_path, max_vocab=cfg.max_vocab)

    metadata = prepare_dataset(
        input_path,
        cfg.output_dir,
        tokenizer,
        val_split=cfg.val_split,
        add_bos=cfg.add_bos,
        add_eos=cfg.add_eos,
        max_lines=cfg.max_lines,
    )

    # Save after encoding: learn-on-encode may have grown the vocabulary
    tokenizer.save(cfg.tokenizer_dir)
    cfg.to_json(os.path.join(cfg.output_dir, "data_config.json"))
    return metadata


def main():
    parser = argparse.ArgumentParser(
        description="Prepare token data for training",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--input", "-i", type=str, required=True, help="Raw text file")
    parser.add_argument("--output", "-o", type=str, default="data/tokens", help="Token output directory")
    parser.add_argument("--tokenizer_dir", type=str, default="data/tokenizer", help="Tokenizer directory")
    parser.add_argument("--max_vocab", type=int, default=None, help="Max non-special tokens")
    parser.add_argument("--val_split", type=float, default=0.1, help="Validation fraction")
    parser.add_argument("--max_lines", type=int, default=None, help="Maximum lines (for testing)")
    parser.add_argument("--add_bos", action="store_true", help="Prepend BOS to each line")
    parser.add_argument("--no_eos", action="store_true", help="Do not append EOS to each line")
    parser.add_argument("--no_learn_on_encode", action="store_true", help="Map unseen tokens to UNK")
    parser.add_argument("--skip_clean", action="store_true", help="Use the input file as-is")
    args = parser.parse_args()

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}")
        sys.exit(1)

    cfg = DataConfig(
        raw_data_path=args.input,
        tokenizer_dir=args.tokenizer_dir,
        output_dir=args.output,
        max_vocab=args.max_vocab,
        val_split=args.val_split,
        add_bos=args.add_bos,
        add_eos=not args.no_eos,
        max_lines=args.max_lines,
    )
    tok_cfg = TokenizerConfig(learn_on_encode=not args.no_learn_on_encode)

    print("=" * 50)
    print("Data Preparation")
    print("=" * 50)
    metadata = run(cfg, tok_cfg, skip_clean=args.skip_clean)
    print("=" * 50)
    print(f"Vocab size:   {metadata['vocab_size']:,}")
    print(f"Vocab hash:   {metadata['vocab_hash']}")
    print(f"Output dir:   {cfg.output_dir}/")
    print("=" * 50)


if __name__ == "__main__":
    main()
