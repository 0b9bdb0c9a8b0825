#!/usr/bin/env python3
"""
Tokenizer Command Line
======================
Train, encode, decode and inspect a vocabulary kept in a VocabStore.

Usage:
    # Learn a vocabulary (resets unless --append)
    wordtok train --text "Good morning, world!" --max_vocab 200

    # Encode (new tokens are learned and written back to the store)
    wordtok encode --text "Hello, tokenizer!" --bos --eos

    # Decode any text containing ids, e.g. "4, 5 6"
    wordtok decode --ids "2,4,5,3"

    # Inspect / clear
    wordtok show
    wordtok reset
    wordtok delete
"""

import argparse
import re
import sys
from typing import List

from wordtok.config import TokenizerConfig
from wordtok.errors import EmptyInput
from wordtok.store import DEFAULT_KEY, VocabStore
from wordtok.tokenizer.dynamic import DynamicTokenizer


def parse_ids(text: str) -> List[int]:
    """Every run of digits in text is one id ("0,1, 2" -> [0, 1, 2])."""
    if not text:
        return []
    return [int(n) for n in re.findall(r"\d+", text)]


def require_text(text: str) -> str:
    if not text or not text.strip():
        raise EmptyInput("Please enter text to encode.")
    return text


def require_ids(text: str) -> List[int]:
    ids = parse_ids(text)
    if not ids:
        raise EmptyInput("Please enter at least one token ID to decode (numbers like 0,1,2).")
    return ids


def read_text(args) -> str:
    if args.file:
        with open(args.file, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    return args.text or ""


def open_tokenizer(args, store: VocabStore) -> DynamicTokenizer:
    """Fresh tokenizer, with the stored vocabulary loaded when there is one."""
    tokenizer = DynamicTokenizer(TokenizerConfig(
        lowercase=not args.no_lowercase,
        learn_on_encode=not args.no_learn_on_encode,
    ))
    if store.exists(args.key):
        store.load(tokenizer, args.key)
    return tokenizer


def format_vocab(tokenizer: DynamicTokenizer) -> str:
    lines = [f"{idx:>6}  {token}" for idx, token in tokenizer.vocab_items()]
    lines.append(f"({tokenizer.vocab_size} tokens, {tokenizer.vocab_size - tokenizer.num_special} learned)")
    return "\n".join(lines)


# ========================================
# Commands
# ========================================

def cmd_train(args, store: VocabStore) -> None:
    tokenizer = open_tokenizer(args, store)
    tokenizer.train(read_text(args), max_vocab=args.max_vocab, append=args.append, verbose=True)
    store.save(tokenizer, args.key)


def cmd_encode(args, store: VocabStore) -> None:
    text = require_text(read_text(args))
    tokenizer = open_tokenizer(args, store)
    before = tokenizer.vocab_size

    ids = tokenizer.encode(text, add_bos=args.bos, add_eos=args.eos)
    print(f"Ids:    {ids}")
    print(f"Tokens: {tokenizer.convert_ids_to_tokens(ids)}")

    if tokenizer.vocab_size != before:
        print(f"[Tokenizer] Learned {tokenizer.vocab_size - before} new tokens")
        store.save(tokenizer, args.key)


def cmd_decode(args, store: VocabStore) -> None:
    ids = require_ids(args.ids)
    tokenizer = open_tokenizer(args, store)
    print(tokenizer.decode(ids, skip_special=not args.keep_special))


def cmd_show(args, store: VocabStore) -> None:
    tokenizer = open_tokenizer(args, store)
    print(format_vocab(tokenizer))


def cmd_reset(args, store: VocabStore) -> None:
    tokenizer = open_tokenizer(args, store)
    tokenizer.reset()
    store.save(tokenizer, args.key)


def cmd_delete(args, store: VocabStore) -> None:
    store.delete(args.key)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dynamic-vocabulary tokenizer",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--store", type=str, default="data/vocab_store", help="Vocab store directory")
    parser.add_argument("--key", type=str, default=DEFAULT_KEY, help="Vocab key within the store")
    parser.add_argument("--no_lowercase", action="store_true", help="Keep the input's case")
    parser.add_argument(
        "--no_learn_on_encode",
        action="store_true",
        help="Map unknown tokens to UNK instead of learning them"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("train", help="Learn vocabulary from text")
    p.add_argument("--text", "-t", type=str, default=None, help="Training text")
    p.add_argument("--file", "-f", type=str, default=None, help="Read training text from file")
    p.add_argument("--max_vocab", "-v", type=int, default=None, help="Max non-special tokens")
    p.add_argument("--append", action="store_true", help="Append (otherwise reset)")
    p.set_defaults(func=cmd_train)

    p = sub.add_parser("encode", help="Encode text to ids")
    p.add_argument("--text", "-t", type=str, default=None, help="Text to encode")
    p.add_argument("--file", "-f", type=str, default=None, help="Read text from file")
    p.add_argument("--bos", action="store_true", help="Prepend BOS")
    p.add_argument("--eos", action="store_true", help="Append EOS")
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser("decode", help="Decode ids to text")
    p.add_argument("--ids", "-i", type=str, required=True, help='Ids, e.g. "0,1,2"')
    p.add_argument("--keep_special", action="store_true", help="Keep special tokens")
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("show", help="List the vocabulary by id")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("reset", help="Reset the stored vocabulary to special tokens only")
    p.set_defaults(func=cmd_reset)

    p = sub.add_parser("delete", help="Delete the stored vocabulary")
    p.set_defaults(func=cmd_delete)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    store = VocabStore(args.store)
    try:
        args.func(args, store)
    except ValueError as e:  # includes EmptyInput and InvalidVocabulary
        print(f"Error: {e}")
        return 1
    except FileNotFoundError as e:
        print(f"Error: Input file not found: {e.filename}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
