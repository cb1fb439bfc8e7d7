"""
mocap_bvh - BVH Motion Capture Parser

Reads Biovision Hierarchy (.bvh) files into an in-memory skeleton:
- Joint tree with offsets and ordered channel lists
- Flat joint registry in pre-order, matching the motion data layout
- Per-joint motion samples for every frame

License: MIT
"""

__version__ = "1.0.0"
__author__ = "MOOOOOOCAP Contributors"
__license__ = "MIT"

from mocap_bvh.config import ParserConfig
from mocap_bvh.core.errors import BVHParseError, ErrorKind, ParseResult
from mocap_bvh.core.parser import BVHParser
from mocap_bvh.core.types import Channel, Joint, Skeleton
from mocap_bvh.loader import load_bvh, load_bvh_files, parse_bvh_string

__all__ = [
    "__version__",
    "ParserConfig",
    "BVHParser",
    "BVHParseError",
    "ErrorKind",
    "ParseResult",
    "Channel",
    "Joint",
    "Skeleton",
    "load_bvh",
    "load_bvh_files",
    "parse_bvh_string",
]
