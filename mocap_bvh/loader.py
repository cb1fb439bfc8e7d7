"""
File-level helpers around BVHParser.

The parser consumes already-open streams; these functions handle opening
files and directories and turn I/O failures into StreamUnavailable.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from mocap_bvh.config import ParserConfig
from mocap_bvh.core.errors import ParseResult, StreamUnavailable
from mocap_bvh.core.parser import BVHParser
from mocap_bvh.core.types import Skeleton

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def parse_bvh_file(path: PathLike, config: Optional[ParserConfig] = None) -> ParseResult:
    """
    Parse a BVH file without raising on structural errors.

    Args:
        path: Path to the .bvh file
        config: Parser configuration

    Returns:
        ParseResult; a file that cannot be opened yields a
        STREAM_UNAVAILABLE failure.
    """
    config = config or ParserConfig()
    path = Path(path)
    skeleton = Skeleton()

    try:
        f = open(path, "r", encoding=config.encoding)
    except OSError as e:
        error = StreamUnavailable(f"Cannot open file to parse: {path} ({e.strerror or e})")
        logger.error(str(error))
        return ParseResult(skeleton=skeleton, error=error)

    with f:
        return BVHParser(config).parse(f, skeleton, source_name=str(path))


def load_bvh(path: PathLike, config: Optional[ParserConfig] = None) -> Skeleton:
    """Load and parse a BVH file, raising BVHParseError on failure."""
    return parse_bvh_file(path, config).raise_for_error()


def parse_bvh_string(text: str, config: Optional[ParserConfig] = None) -> Skeleton:
    """Parse BVH text held in memory, raising BVHParseError on failure."""
    return BVHParser(config).load(text, source_name="<string>")


def load_bvh_files(
    directory: PathLike, config: Optional[ParserConfig] = None
) -> Dict[Path, ParseResult]:
    """
    Parse every file in a directory matching ``config.file_pattern``.

    Failures are logged and kept in the returned mapping; they do not stop
    the remaining files from being parsed.
    """
    config = config or ParserConfig()
    results: Dict[Path, ParseResult] = {}

    for filepath in sorted(Path(directory).glob(config.file_pattern)):
        result = parse_bvh_file(filepath, config)
        if not result.ok:
            logger.warning(f"Failed to load {filepath}: {result.error}")
        results[filepath] = result

    logger.info(
        f"Loaded {sum(r.ok for r in results.values())}/{len(results)} files from {directory}"
    )
    return results
