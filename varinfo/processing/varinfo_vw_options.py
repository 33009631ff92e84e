#!/usr/bin/env python3
"""Extract the trainer option effects the feature catalog depends on.

Only a handful of trainer options change what vw-varinfo has to do:
namespace pairs (``-q``), namespace filtering (``--keep``/``--ignore``) and
one-against-all style multi-class reductions. Everything else is forwarded
to the trainer untouched.
"""

from __future__ import annotations

import shlex
from typing import Iterable

from varinfo_errors import UnsupportedOptionError

PAIR_OPTIONS = ("-q", "--quadratic")
KEEP_OPTIONS = ("--keep",)
IGNORE_OPTIONS = ("--ignore",)
MULTICLASS_OPTIONS = ("--oaa", "--csoaa", "--multilabel_oaa")
UNSUPPORTED_MULTICLASS_OPTIONS = (
    "--ect",
    "--wap",
    "--csoaa_ldf",
    "--wap_ldf",
    "--log_multi",
    "--recall_tree",
    "--cb",
    "--cb_adf",
    "--cbify",
    "--plt",
)

SINGLE_LABEL = "1"
WILDCARD_CODE = ":"


class VwOptionSet:
    """The option tokens forwarded to the trainer, plus what they mean for the catalog."""

    def __init__(self, tokens: Iterable[str]) -> None:
        self.tokens: list[str] = list(tokens)
        self.pairs: list[tuple[str, str]] = []
        self.keep: set[str] = set()
        self.ignore: set[str] = set()
        self.multiclass_option = ""
        self._scan()

    @classmethod
    def from_string(cls, raw: str) -> "VwOptionSet":
        return cls(shlex.split(raw))

    @property
    def multiclass(self) -> bool:
        return bool(self.multiclass_option)

    def _scan(self) -> None:
        tokens = self.tokens
        idx = 0
        while idx < len(tokens):
            name, value, consumed = _split_option(tokens, idx)
            idx += consumed
            if name in UNSUPPORTED_MULTICLASS_OPTIONS:
                raise UnsupportedOptionError(
                    f"multi-class reduction {name} is not supported (only one-against-all style: "
                    f"{', '.join(MULTICLASS_OPTIONS)})"
                )
            if name in PAIR_OPTIONS:
                if len(value) != 2:
                    raise UnsupportedOptionError(f"{name} expects exactly two namespace codes, got {value!r}")
                self.pairs.append((value[0], value[1]))
            elif name in KEEP_OPTIONS:
                self.keep.update(value)
            elif name in IGNORE_OPTIONS:
                self.ignore.update(value)
            elif name in MULTICLASS_OPTIONS:
                self.multiclass_option = name


def _split_option(tokens: list[str], idx: int) -> tuple[str, str, int]:
    """Return ``(option, value, tokens_consumed)`` for the token at ``idx``."""
    token = tokens[idx]
    takes_value = PAIR_OPTIONS + KEEP_OPTIONS + IGNORE_OPTIONS + MULTICLASS_OPTIONS
    if token.startswith("--") and "=" in token:
        name, _, value = token.partition("=")
        return name, value, 1
    if token.startswith("-q") and token not in PAIR_OPTIONS and not token.startswith("--"):
        return "-q", token[2:], 1
    if token in takes_value:
        if idx + 1 >= len(tokens):
            raise UnsupportedOptionError(f"option {token} is missing its value")
        return token, tokens[idx + 1], 2
    return token, "", 1


def short_code(namespace: str) -> str:
    """First character of a namespace; the default namespace is addressed as a space."""
    return namespace[0] if namespace else " "
