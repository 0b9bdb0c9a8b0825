#!/usr/bin/env python3
"""
Vocabulary Training Script
==========================
Train a dynamic-vocabulary tokenizer on a text corpus.

Usage:
    python -m wordtok.tokenizer.train_vocab --input data/raw/input.txt --output data/tokenizer --max_vocab 4096

This script:
1. Streams the text file line by line, counting token frequencies
2. Adds tokens most-frequent-first, up to --max_vocab non-special tokens
3. Saves tokenizer files (config.json, vocab.json)
"""

import argparse
import os
import sys

from wordtok.config import TokenizerConfig
from wordtok.tokenizer.dynamic import DynamicTokenizer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train a dynamic-vocabulary tokenizer",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Path to input text file"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default="data/tokenizer",
        help="Output directory for tokenizer files"
    )
    parser.add_argument(
        "--max_vocab", "-v",
        type=int,
        default=None,
        help="Maximum number of non-special tokens (default: unbounded)"
    )
    parser.add_argument(
        "--append",
        action="store_true",
        help="Extend the tokenizer already saved in --output instead of starting fresh"
    )
    parser.add_argument(
        "--no_lowercase",
        action="store_true",
        help="Keep the input's case"
    )
    parser.add_argument(
        "--no_learn_on_encode",
        action="store_true",
        help="Map unknown tokens to UNK at encode time instead of learning them"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress progress output"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}")
        return 1
    if args.max_vocab is not None and args.max_vocab < 0:
        print(f"Error: --max_vocab must be non-negative, got {args.max_vocab}")
        return 1

    verbose = not args.quiet
    if verbose:
        print("=" * 50)
        print("Vocabulary Training")
        print("=" * 50)
        print(f"Input file:    {args.input}")
        print(f"Output dir:    {args.output}")
        print(f"Max vocab:     {args.max_vocab if args.max_vocab is not None else 'unbounded'}")
        print(f"Append:        {args.append}")
        print("=" * 50)

    if args.append and os.path.exists(os.path.join(args.output, "vocab.json")):
        tokenizer = DynamicTokenizer.load(args.output, verbose=verbose)
    else:
        tokenizer = DynamicTokenizer(TokenizerConfig(
            lowercase=not args.no_lowercase,
            learn_on_encode=not args.no_learn_on_encode,
        ))

    tokenizer.train_from_file(
        args.input,
        max_vocab=args.max_vocab,
        append=args.append,
        verbose=verbose
    )
    tokenizer.save(args.output, verbose=verbose)

    if verbose:
        print("\n" + "=" * 50)
        print("Training Complete!")
        print("=" * 50)
        print(f"Final vocab size: {tokenizer.vocab_size}")
        print(f"Vocab hash:       {tokenizer.get_vocab_hash()}")
        print(f"Files saved to:   {args.output}/")
        print("=" * 50)

    return 0


if __name__ == "__main__":
    sys.exit(main())
