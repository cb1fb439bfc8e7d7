"""
Whitespace token reader for BVH text.

The reader has no grammar knowledge: it splits the input on whitespace,
reads lines lazily and only ever moves forward.
"""

from __future__ import annotations

import math
import re
from collections import deque
from typing import Deque, Iterable, Iterator, Optional, TextIO, Union

from mocap_bvh.core.errors import (
    MalformedNumber,
    StreamUnavailable,
    UnexpectedEndOfInput,
    UnexpectedToken,
)

Source = Union[str, TextIO, Iterable[str]]

# ASCII decimal only: no underscores, nan/inf or non-ASCII digits
REAL_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class TokenStream:
    """
    Forward-only token cursor over a text source.

    Args:
        source: An open text stream, a whole document as a string, or any
            iterable yielding lines
    """

    def __init__(self, source: Source):
        if isinstance(source, str):
            source = source.splitlines()
        self._lines: Iterator[str] = iter(source)
        self._pending: Deque[str] = deque()
        self._line_no = 0
        self._exhausted = False

        self.line = 0
        self.last_token: Optional[str] = None
        self.tokens_consumed = 0

    def _fill(self) -> bool:
        """Read lines until a token is pending. False once the source is exhausted."""
        while not self._pending:
            if self._exhausted:
                return False
            try:
                raw = next(self._lines)
            except StopIteration:
                self._exhausted = True
                return False
            except (OSError, UnicodeDecodeError) as e:
                self._exhausted = True
                raise StreamUnavailable(f"Cannot read input stream: {e}", line=self._line_no)
            self._line_no += 1
            self._pending.extend(raw.split())
        return True

    def at_end(self) -> bool:
        return not self._fill()

    def next_token(self, expected: Optional[str] = None, context: Optional[str] = None) -> str:
        """Return the next token, or raise UnexpectedEndOfInput naming what was expected."""
        if not self._fill():
            raise UnexpectedEndOfInput(
                f"Unexpected end of input, expected {expected or 'a token'}"
                + (f" after '{self.last_token}'" if self.last_token is not None else ""),
                token=self.last_token,
                expected=expected,
                line=self.line,
                context=context,
            )
        token = self._pending.popleft()
        self.line = self._line_no
        self.last_token = token
        self.tokens_consumed += 1
        return token

    def expect(self, keyword: str, context: Optional[str] = None) -> str:
        """Consume the next token and require it to equal ``keyword``."""
        token = self.next_token(expected=keyword, context=context)
        if token != keyword:
            raise UnexpectedToken(
                f"Expected '{keyword}', but found '{token}'",
                token=token,
                expected=keyword,
                line=self.line,
                context=context,
            )
        return token

    def _malformed(self, token: str, expected: str, context: Optional[str]) -> MalformedNumber:
        return MalformedNumber(
            f"Expected {expected}, but found '{token}'",
            token=token,
            expected=expected,
            line=self.line,
            context=context,
        )

    def next_number(self, expected: str = "a number", context: Optional[str] = None) -> float:
        token = self.next_token(expected=expected, context=context)
        if not REAL_PATTERN.fullmatch(token):
            raise self._malformed(token, expected, context)
        value = float(token)
        # exponent overflow
        if not math.isfinite(value):
            raise self._malformed(token, expected, context)
        return value

    def next_int(self, expected: str = "an integer", context: Optional[str] = None) -> int:
        token = self.next_token(expected=expected, context=context)
        if not INT_PATTERN.fullmatch(token):
            raise self._malformed(token, expected, context)
        return int(token)
