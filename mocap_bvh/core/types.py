"""
Skeleton data structures populated by the BVH parser.

Provides:
- Channel: the six legal per-frame degrees of freedom
- Joint: a node of the hierarchy with offset, channels and motion samples
- Skeleton: the joint tree, the flat joint registry and motion metadata
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

END_SITE = "End Site"


class Channel(Enum):
    """Channel kinds, valued by their exact BVH spelling."""

    XPOSITION = "Xposition"
    YPOSITION = "Yposition"
    ZPOSITION = "Zposition"
    XROTATION = "Xrotation"
    YROTATION = "Yrotation"
    ZROTATION = "Zrotation"

    @classmethod
    def from_token(cls, token: str) -> Optional["Channel"]:
        """Map a token to a channel by exact match, or None."""
        return _CHANNELS_BY_NAME.get(token)

    @property
    def is_position(self) -> bool:
        return self.value.endswith("position")

    @property
    def is_rotation(self) -> bool:
        return self.value.endswith("rotation")

    @property
    def axis(self) -> str:
        """Axis letter: 'X', 'Y' or 'Z'."""
        return self.value[0]


_CHANNELS_BY_NAME: Dict[str, Channel] = {c.value: c for c in Channel}


class Joint:
    """
    A single joint in the skeleton hierarchy.

    The parent link is a weak reference: a joint owns its children, never
    its parent. It is set at construction and cannot be reassigned.

    Attributes:
        name: Joint name ("End Site" for leaf terminators)
        offset: Rest offset from the parent, shape (3,)
        channels: Ordered channel list, empty for end sites
        children: Child joints in declaration order
        motion_frames: One array of len(channels) values per frame
    """

    def __init__(
        self,
        name: str,
        offset: Sequence[float] = (0.0, 0.0, 0.0),
        channels: Optional[Sequence[Channel]] = None,
        parent: Optional["Joint"] = None,
    ):
        self.name = name
        self.offset: NDArray[np.float64] = np.asarray(offset, dtype=np.float64).reshape(3)
        self.channels: List[Channel] = list(channels) if channels else []
        self.children: List[Joint] = []
        self.motion_frames: List[NDArray[np.float64]] = []
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    def __repr__(self) -> str:
        return (
            f"Joint(name={self.name!r}, channels={self.num_channels}, "
            f"children={len(self.children)})"
        )

    @property
    def parent(self) -> Optional["Joint"]:
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def num_channels(self) -> int:
        return len(self.channels)

    @property
    def num_frames(self) -> int:
        return len(self.motion_frames)

    @property
    def is_end_site(self) -> bool:
        return self.name == END_SITE and not self.channels

    @property
    def is_root(self) -> bool:
        return self._parent_ref is None

    @property
    def depth(self) -> int:
        """Number of ancestors (0 for the root)."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def get_rotation_order(self) -> str:
        """Rotation order from channels, e.g. 'ZXY'."""
        return "".join(c.axis for c in self.channels if c.is_rotation)

    def add_child(self, child: "Joint") -> None:
        if child.parent is not self:
            raise ValueError(f"Joint '{child.name}' was not created as a child of '{self.name}'")
        self.children.append(child)

    def add_frame_motion_data(self, values: Sequence[float]) -> None:
        """Append one frame sample; its length must match the channel count."""
        data = np.asarray(values, dtype=np.float64)
        if data.shape != (self.num_channels,):
            raise ValueError(
                f"Joint '{self.name}' expects {self.num_channels} values per frame, "
                f"got {data.size}"
            )
        self.motion_frames.append(data)

    def motion_array(self) -> NDArray[np.float64]:
        """Motion samples as a (num_frames, num_channels) array."""
        if not self.motion_frames:
            return np.zeros((0, self.num_channels))
        return np.vstack(self.motion_frames)

    def iter_preorder(self) -> Iterator["Joint"]:
        """Yield this joint, then each child subtree in order."""
        stack = [self]
        while stack:
            joint = stack.pop()
            yield joint
            stack.extend(reversed(joint.children))


@dataclass
class Skeleton:
    """
    Parsed BVH skeleton.

    ``joints`` is the flat registry in pre-order registration order; the
    motion section distributes values in exactly this order.
    """

    root: Optional[Joint] = None
    joints: List[Joint] = field(default_factory=list)
    frame_count: int = 0
    frame_time: float = 0.0
    is_complete: bool = False

    def add_joint(self, joint: Joint) -> None:
        self.joints.append(joint)

    def set_root_joint(self, joint: Joint) -> None:
        self.root = joint

    def set_num_frames(self, frame_count: int) -> None:
        self.frame_count = frame_count

    def set_frame_time(self, frame_time: float) -> None:
        self.frame_time = frame_time

    @property
    def num_joints(self) -> int:
        return len(self.joints)

    @property
    def num_channels(self) -> int:
        """Values consumed per motion frame."""
        return sum(joint.num_channels for joint in self.joints)

    @property
    def duration(self) -> float:
        return self.frame_count * self.frame_time

    @property
    def fps(self) -> float:
        return 1.0 / self.frame_time if self.frame_time > 0 else 0.0

    @property
    def joint_names(self) -> List[str]:
        return [joint.name for joint in self.joints]

    def find_joint(self, name: str) -> Optional[Joint]:
        """First registered joint with this name."""
        for joint in self.joints:
            if joint.name == name:
                return joint
        return None

    def channel_layout(self) -> List[Tuple[str, Channel]]:
        """(joint name, channel) pairs in the order values appear in a frame."""
        return [(joint.name, channel) for joint in self.joints for channel in joint.channels]

    def motion_array(self) -> NDArray[np.float64]:
        """All motion as a (frame_count, num_channels) array."""
        columns = [j.motion_array() for j in self.joints if j.num_channels > 0]
        if not columns:
            return np.zeros((self.frame_count, 0))
        return np.hstack(columns)

    def to_dict(self, include_motion: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""

        def joint_to_dict(joint: Joint) -> Dict[str, Any]:
            data: Dict[str, Any] = {
                "name": joint.name,
                "offset": [float(v) for v in joint.offset],
                "channels": [c.value for c in joint.channels],
                "children": [joint_to_dict(child) for child in joint.children],
            }
            if include_motion:
                data["motion"] = joint.motion_array().tolist()
            return data

        return {
            "frame_count": self.frame_count,
            "frame_time": self.frame_time,
            "num_joints": self.num_joints,
            "num_channels": self.num_channels,
            "duration": self.duration,
            "joints": self.joint_names,
            "hierarchy": joint_to_dict(self.root) if self.root is not None else None,
        }
