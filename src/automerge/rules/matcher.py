"""Glob matcher for author logins and file paths.

Semantics:

- ``**`` matches any sequence of characters, ``/`` included
- ``*`` matches any sequence of characters except ``/``
- ``?`` matches exactly one character
- everything else (``.``, ``[``, ``]``, ...) is literal
- the pattern is anchored to the whole text

Patterns compile to a flat token list that is run as an NFA over the text,
so matching is O(len(text) * len(pattern)) with no backtracking.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, Iterable, Tuple

_LITERAL = 0
_ANY_CHAR = 1  # ?
_SEGMENT = 2   # *
_DEEP = 3      # **

Token = Tuple[int, str]


@dataclass(frozen=True)
class GlobPattern:
    """A compiled glob pattern."""

    pattern: str
    tokens: Tuple[Token, ...]

    def _closure(self, states: Iterable[int]) -> FrozenSet[int]:
        # star tokens may match the empty string
        out = set()
        stack = list(states)
        while stack:
            i = stack.pop()
            if i in out:
                continue
            out.add(i)
            if i < len(self.tokens) and self.tokens[i][0] in (_SEGMENT, _DEEP):
                stack.append(i + 1)
        return frozenset(out)

    def matches(self, text: str) -> bool:
        end = len(self.tokens)
        states = self._closure([0])
        for ch in text:
            nxt = []
            for i in states:
                if i == end:
                    continue
                kind, lit = self.tokens[i]
                if kind == _LITERAL:
                    if ch == lit:
                        nxt.append(i + 1)
                elif kind == _ANY_CHAR:
                    nxt.append(i + 1)
                elif kind == _SEGMENT:
                    if ch != "/":
                        nxt.append(i)
                else:
                    nxt.append(i)
            if not nxt:
                return False
            states = self._closure(nxt)
        return end in states


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> GlobPattern:
    tokens: list[Token] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "*":
            if pattern.startswith("**", i):
                tokens.append((_DEEP, ""))
                i += 2
            else:
                tokens.append((_SEGMENT, ""))
                i += 1
            # "***" and longer runs behave like "**"
            while i < len(pattern) and pattern[i] == "*":
                tokens[-1] = (_DEEP, "")
                i += 1
            continue
        if ch == "?":
            tokens.append((_ANY_CHAR, ""))
        else:
            tokens.append((_LITERAL, ch))
        i += 1
    return GlobPattern(pattern=pattern, tokens=tuple(tokens))


def match(text: str, pattern: str) -> bool:
    """Return True if *pattern* matches the whole of *text*."""
    return compile_pattern(pattern).matches(text)


def match_any(text: str, patterns: Iterable[str]) -> bool:
    return any(match(text, p) for p in patterns)
