"""
BVH (Biovision Hierarchy) parser.

Grammar overview:

    HIERARCHY
    ROOT <name>
    {
        OFFSET <x> <y> <z>
        CHANNELS <n> <channel>*n
        JOINT <name> { ... }          (recursive)
        End Site { OFFSET <x> <y> <z> }
    }
    MOTION
    Frames: <n>
    Frame Time: <seconds>
    <n rows of values, one per channel in joint registration order>

Joints are registered on the skeleton in pre-order (a joint right after its
OFFSET and CHANNELS, before any of its children). The motion section relies
on that order: each frame is distributed over the registered joints, each
joint taking as many values as it declared channels.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

import numpy as np
from numpy.typing import NDArray

from mocap_bvh.config import ParserConfig
from mocap_bvh.core.errors import (
    BVHParseError,
    MalformedNumber,
    NestingTooDeep,
    ParseResult,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnrecognizedChannel,
)
from mocap_bvh.core.tokenizer import Source, TokenStream
from mocap_bvh.core.types import END_SITE, Channel, Joint, Skeleton

logger = logging.getLogger(__name__)

# Keywords
HIERARCHY = "HIERARCHY"
ROOT = "ROOT"
JOINT = "JOINT"
END = "End"
SITE = "Site"
OFFSET = "OFFSET"
CHANNELS = "CHANNELS"
MOTION = "MOTION"
FRAMES = "Frames:"
FRAME = "Frame"
TIME = "Time:"
OPEN_BRACE = "{"
CLOSE_BRACE = "}"

CHILD_TOKENS = f"'{JOINT}', '{END_SITE}' or '{CLOSE_BRACE}'"
CHANNEL_NAMES = ", ".join(c.value for c in Channel)


def _format_values(values: NDArray[np.float64]) -> str:
    return ", ".join(f"{v:g}" for v in values)


class BVHParser:
    """
    Parser for BVH motion capture text.

    The parser keeps no state between calls; all results go into the
    Skeleton handed to ``parse``.

    Args:
        config: Parser configuration (defaults used if None)
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()

    def parse(
        self,
        source: Union[TokenStream, Source],
        skeleton: Skeleton,
        source_name: str = "<stream>",
    ) -> ParseResult:
        """
        Parse one BVH document into ``skeleton``.

        Args:
            source: Token stream, open text stream, string or iterable of lines
            skeleton: Empty skeleton to populate
            source_name: Name used in log messages

        Returns:
            ParseResult holding the skeleton and, on failure, the first error.
            A failed skeleton may be partially populated and must not be used.
        """
        if skeleton.joints or skeleton.root is not None:
            raise ValueError("BVHParser.parse() requires an empty Skeleton")

        tokens = source if isinstance(source, TokenStream) else TokenStream(source)

        logger.info(f"Parsing BVH: {source_name}")

        try:
            self._parse_document(tokens, skeleton)
        except BVHParseError as e:
            logger.error(f"Failed to parse {source_name}: [{e.kind.value}] {e}")
            return ParseResult(skeleton=skeleton, error=e)

        skeleton.is_complete = True
        logger.info(
            f"Successfully parsed {source_name}: {skeleton.num_joints} joints, "
            f"{skeleton.num_channels} channels, {skeleton.frame_count} frames"
        )
        return ParseResult(skeleton=skeleton)

    def load(self, source: Union[TokenStream, Source], source_name: str = "<stream>") -> Skeleton:
        """Parse into a new Skeleton, raising BVHParseError on failure."""
        return self.parse(source, Skeleton(), source_name=source_name).raise_for_error()

    # ------------------------------------------------------------------
    # Document structure
    # ------------------------------------------------------------------

    def _parse_document(self, tokens: TokenStream, skeleton: Skeleton) -> None:
        tokens.expect(HIERARCHY, context="document header")
        self._parse_hierarchy(tokens, skeleton)

        tokens.expect(MOTION, context="document")
        self._parse_motion(tokens, skeleton)

        self._check_trailing_data(tokens)

    def _parse_hierarchy(self, tokens: TokenStream, skeleton: Skeleton) -> None:
        logger.debug("Parsing hierarchy")

        tokens.expect(ROOT, context="hierarchy")
        root = self._parse_joint(tokens, skeleton, parent=None, depth=0)
        skeleton.set_root_joint(root)

        logger.debug(f"There are {skeleton.num_channels} data channels in the file")

    def _parse_joint(
        self,
        tokens: TokenStream,
        skeleton: Skeleton,
        parent: Optional[Joint],
        depth: int,
    ) -> Joint:
        """Parse a ROOT/JOINT block (keyword already consumed) and its subtree."""
        if depth > self.config.max_depth:
            raise NestingTooDeep(
                f"Joint nesting exceeds the maximum depth of {self.config.max_depth}",
                token=tokens.last_token,
                line=tokens.line,
                context=f"children of '{parent.name}'" if parent is not None else "hierarchy",
            )

        name = tokens.next_token(expected="joint name", context="hierarchy")
        context = f"joint '{name}'"

        tokens.expect(OPEN_BRACE, context=context)
        tokens.expect(OFFSET, context=context)
        offset = self._parse_offset(tokens, context)
        tokens.expect(CHANNELS, context=context)
        channels = self._parse_channel_order(tokens, context)

        joint = Joint(name=name, offset=offset, channels=channels, parent=parent)
        skeleton.add_joint(joint)

        logger.debug(
            f"Joint {name}: offset=({_format_values(offset)}), "
            f"channels=[{' '.join(c.value for c in channels)}]"
        )

        while True:
            if tokens.at_end():
                raise UnexpectedEndOfInput(
                    f"Cannot parse joint '{name}', unexpected end of file. "
                    f"Last token: '{tokens.last_token}'",
                    token=tokens.last_token,
                    expected=CHILD_TOKENS,
                    line=tokens.line,
                    context=context,
                )

            token = tokens.next_token()

            if token == JOINT:
                child = self._parse_joint(tokens, skeleton, parent=joint, depth=depth + 1)
                joint.add_child(child)
            elif token == END:
                child = self._parse_end_site(tokens, skeleton, parent=joint)
                joint.add_child(child)
            elif token == CLOSE_BRACE:
                return joint
            else:
                raise UnexpectedToken(
                    f"Expected {CHILD_TOKENS}, but found '{token}'",
                    token=token,
                    expected=CHILD_TOKENS,
                    line=tokens.line,
                    context=context,
                )

    def _parse_end_site(self, tokens: TokenStream, skeleton: Skeleton, parent: Joint) -> Joint:
        """Parse 'Site { OFFSET x y z }' after the 'End' token."""
        context = f"{END_SITE} of '{parent.name}'"

        tokens.expect(SITE, context=context)
        tokens.expect(OPEN_BRACE, context=context)
        tokens.expect(OFFSET, context=context)
        offset = self._parse_offset(tokens, context)
        tokens.expect(CLOSE_BRACE, context=context)

        end_site = Joint(name=END_SITE, offset=offset, parent=parent)
        skeleton.add_joint(end_site)

        logger.debug(f"{context}: offset=({_format_values(offset)})")
        return end_site

    def _parse_offset(self, tokens: TokenStream, context: str) -> NDArray[np.float64]:
        return np.array(
            [tokens.next_number(expected=f"{OFFSET} component", context=context) for _ in range(3)],
            dtype=np.float64,
        )

    def _parse_channel_order(self, tokens: TokenStream, context: str) -> List[Channel]:
        """Read '<n> <channel>*n' and map the names to Channel members."""
        num = tokens.next_int(expected="channel count", context=context)
        if num < 0:
            raise MalformedNumber(
                f"Channel count must not be negative, got {num}",
                token=tokens.last_token,
                expected="channel count",
                line=tokens.line,
                context=context,
            )

        channels = []
        for _ in range(num):
            token = tokens.next_token(expected="channel name", context=context)
            channel = Channel.from_token(token)
            if channel is None:
                raise UnrecognizedChannel(
                    f"Invalid channel '{token}'",
                    token=token,
                    expected=CHANNEL_NAMES,
                    line=tokens.line,
                    context=context,
                )
            channels.append(channel)

        return channels

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def _parse_motion(self, tokens: TokenStream, skeleton: Skeleton) -> None:
        logger.debug("Parsing motion")
        context = "motion header"

        tokens.expect(FRAMES, context=context)
        frame_count = tokens.next_int(expected="frame count", context=context)
        if frame_count < 0:
            raise MalformedNumber(
                f"Frame count must not be negative, got {frame_count}",
                token=tokens.last_token,
                expected="frame count",
                line=tokens.line,
                context=context,
            )
        if frame_count > self.config.max_frames:
            raise MalformedNumber(
                f"Frame count {frame_count} exceeds the maximum of {self.config.max_frames}",
                token=tokens.last_token,
                expected="frame count",
                line=tokens.line,
                context=context,
            )
        skeleton.set_num_frames(frame_count)
        logger.debug(f"Num of frames: {frame_count}")

        tokens.expect(FRAME, context=context)
        tokens.expect(TIME, context=context)
        frame_time = tokens.next_number(expected="frame time", context=context)
        skeleton.set_frame_time(frame_time)
        logger.debug(f"Frame time: {frame_time}")

        values_per_frame = skeleton.num_channels
        if values_per_frame == 0:
            # Nothing to read: every frame shares one empty sample per joint
            for joint in skeleton.joints:
                joint.motion_frames = [np.empty(0, dtype=np.float64)] * frame_count
            return

        trace = logger.isEnabledFor(logging.DEBUG)

        for frame_index in range(frame_count):
            frame_context = f"frame {frame_index}"
            samples = []

            for joint in skeleton.joints:
                data = np.empty(joint.num_channels, dtype=np.float64)
                for i in range(joint.num_channels):
                    if tokens.at_end():
                        raise UnexpectedEndOfInput(
                            f"Unexpected end of motion data: frame {frame_index} of "
                            f"{frame_count} needs {values_per_frame} values",
                            token=tokens.last_token,
                            expected=f"value for {joint.name} {joint.channels[i].value}",
                            line=tokens.line,
                            context=frame_context,
                        )
                    data[i] = tokens.next_number(expected="motion value", context=frame_context)
                samples.append(data)

            # commit only complete frames
            for joint, data in zip(skeleton.joints, samples):
                joint.add_frame_motion_data(data)
                if trace and joint.num_channels:
                    logger.debug(f"{joint.name}: {_format_values(data)}")

    def _check_trailing_data(self, tokens: TokenStream) -> None:
        policy = self.config.trailing_data
        if policy == "ignore" or tokens.at_end():
            return

        token = tokens.next_token()
        if policy == "error":
            raise UnexpectedToken(
                f"Expected end of input after motion data, but found '{token}'",
                token=token,
                expected="end of input",
                line=tokens.line,
                context="document",
            )

        logger.warning(f"Ignoring data after the last motion frame (line {tokens.line}: '{token}')")
