"""
Error types for BVH parsing.

Every parsing function fails fast with one of the exceptions below; the
top-level parser catches the first one and hands it back inside a
ParseResult so callers get an explicit outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from mocap_bvh.core.types import Skeleton


class ErrorKind(Enum):
    """Structural failure categories."""

    UNEXPECTED_TOKEN = "unexpected_token"
    MALFORMED_NUMBER = "malformed_number"
    UNRECOGNIZED_CHANNEL = "unrecognized_channel"
    UNEXPECTED_END_OF_INPUT = "unexpected_end_of_input"
    STREAM_UNAVAILABLE = "stream_unavailable"
    NESTING_TOO_DEEP = "nesting_too_deep"


class BVHParseError(Exception):
    """
    Base class for all BVH parsing failures.

    Attributes:
        kind: Failure category
        message: Human readable description
        token: Offending token (None at end of input)
        expected: What the grammar required at this point
        line: Line number of the offending token, if known
        context: Block being parsed, e.g. "joint 'Hips'" or "frame 3"
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        expected: Optional[str] = None,
        line: Optional[int] = None,
        context: Optional[str] = None,
    ):
        self.message = message
        self.token = token
        self.expected = expected
        self.line = line
        self.context = context
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [self.message]
        if self.context:
            parts.append(f"while parsing {self.context}")
        if self.line is not None:
            parts.append(f"(line {self.line})")
        return " ".join(parts)


class UnexpectedToken(BVHParseError):
    kind = ErrorKind.UNEXPECTED_TOKEN


class MalformedNumber(BVHParseError):
    kind = ErrorKind.MALFORMED_NUMBER


class UnrecognizedChannel(BVHParseError):
    kind = ErrorKind.UNRECOGNIZED_CHANNEL


class UnexpectedEndOfInput(BVHParseError):
    kind = ErrorKind.UNEXPECTED_END_OF_INPUT


class StreamUnavailable(BVHParseError):
    kind = ErrorKind.STREAM_UNAVAILABLE


class NestingTooDeep(BVHParseError):
    kind = ErrorKind.NESTING_TOO_DEEP


@dataclass
class ParseResult:
    """Outcome of a single parse call."""

    skeleton: Skeleton
    error: Optional[BVHParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Failure category, or None on success."""
        return self.error.kind if self.error is not None else None

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_error(self) -> Skeleton:
        """Return the skeleton, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.skeleton
