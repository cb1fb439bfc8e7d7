"""Core BVH parsing components."""

from mocap_bvh.core.errors import (
    BVHParseError,
    ErrorKind,
    MalformedNumber,
    NestingTooDeep,
    ParseResult,
    StreamUnavailable,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnrecognizedChannel,
)
from mocap_bvh.core.parser import BVHParser
from mocap_bvh.core.tokenizer import TokenStream
from mocap_bvh.core.types import END_SITE, Channel, Joint, Skeleton

__all__ = [
    "BVHParser",
    "TokenStream",
    "Channel",
    "Joint",
    "Skeleton",
    "END_SITE",
    "ParseResult",
    "ErrorKind",
    "BVHParseError",
    "UnexpectedToken",
    "MalformedNumber",
    "UnrecognizedChannel",
    "UnexpectedEndOfInput",
    "StreamUnavailable",
    "NestingTooDeep",
]
