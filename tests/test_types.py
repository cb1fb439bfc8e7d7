"""Tests for Channel, Joint and Skeleton."""

import gc
import json

import numpy as np
import pytest

from mocap_bvh.core.parser import BVHParser
from mocap_bvh.core.types import END_SITE, Channel, Joint, Skeleton
from tests.samples import WALK_BVH


class TestChannel:
    @pytest.mark.parametrize("channel", list(Channel))
    def test_from_token_round_trips_spelling(self, channel):
        assert Channel.from_token(channel.value) is channel

    @pytest.mark.parametrize("token", ["Wposition", "XPOSITION", "xrotation", "X", ""])
    def test_from_token_rejects_unknown(self, token):
        assert Channel.from_token(token) is None

    def test_properties(self):
        assert Channel.YPOSITION.is_position
        assert not Channel.YPOSITION.is_rotation
        assert Channel.ZROTATION.is_rotation
        assert Channel.ZROTATION.axis == "Z"


class TestJoint:
    def test_defaults(self):
        joint = Joint("Hips")

        assert joint.is_root
        assert joint.parent is None
        assert joint.depth == 0
        assert joint.num_channels == 0
        np.testing.assert_array_equal(joint.offset, np.zeros(3))

    def test_offset_shape_is_checked(self):
        with pytest.raises(ValueError):
            Joint("Hips", offset=[1.0, 2.0])

    def test_parent_is_weak(self):
        parent = Joint("Hips")
        child = Joint("Spine", parent=parent)
        assert child.parent is parent

        del parent
        gc.collect()
        assert child.parent is None

    def test_parent_is_read_only(self):
        joint = Joint("Spine", parent=Joint("Hips"))
        with pytest.raises(AttributeError):
            joint.parent = None

    def test_add_child_requires_matching_parent(self):
        hips = Joint("Hips")
        other = Joint("Other")

        hips.add_child(Joint("Spine", parent=hips))
        with pytest.raises(ValueError):
            hips.add_child(Joint("Stray", parent=other))
        assert len(hips.children) == 1

    def test_add_frame_motion_data(self):
        joint = Joint("Hips", channels=[Channel.XROTATION, Channel.YROTATION])
        joint.add_frame_motion_data([1.0, 2.0])
        joint.add_frame_motion_data((3.0, 4.0))

        assert joint.num_frames == 2
        np.testing.assert_allclose(joint.motion_array(), [[1.0, 2.0], [3.0, 4.0]])

        with pytest.raises(ValueError):
            joint.add_frame_motion_data([1.0, 2.0, 3.0])

    def test_end_site(self):
        hips = Joint("Hips", channels=[Channel.XPOSITION])
        end = Joint(END_SITE, parent=hips)

        assert end.is_end_site
        assert not hips.is_end_site
        assert end.motion_array().shape == (0, 0)

    def test_rotation_order(self):
        joint = Joint(
            "Hips",
            channels=[
                Channel.XPOSITION,
                Channel.YPOSITION,
                Channel.ZPOSITION,
                Channel.ZROTATION,
                Channel.XROTATION,
                Channel.YROTATION,
            ],
        )
        assert joint.get_rotation_order() == "ZXY"

    def test_repr_does_not_recurse(self):
        hips = Joint("Hips")
        hips.add_child(Joint("Spine", parent=hips))
        assert repr(hips) == "Joint(name='Hips', channels=0, children=1)"


class TestSkeleton:
    @pytest.fixture
    def skeleton(self):
        return BVHParser().load(WALK_BVH)

    def test_empty(self):
        skeleton = Skeleton()

        assert skeleton.root is None
        assert skeleton.num_joints == 0
        assert skeleton.num_channels == 0
        assert skeleton.fps == 0.0
        assert not skeleton.is_complete
        assert skeleton.motion_array().shape == (0, 0)

    def test_timing(self, skeleton):
        assert skeleton.duration == pytest.approx(2 * 0.008333)
        assert skeleton.fps == pytest.approx(120.0, rel=1e-3)

    def test_find_joint(self, skeleton):
        assert skeleton.find_joint("Spine") is skeleton.joints[1]
        assert skeleton.find_joint(END_SITE) is skeleton.joints[3]
        assert skeleton.find_joint("Tail") is None

    def test_channel_layout(self, skeleton):
        layout = skeleton.channel_layout()

        assert len(layout) == skeleton.num_channels
        assert layout[0] == ("Hips", Channel.XPOSITION)
        assert layout[6] == ("Spine", Channel.ZROTATION)
        assert layout[-1] == ("LeftUpLeg", Channel.YROTATION)

    def test_to_dict_is_json_serializable(self, skeleton):
        data = skeleton.to_dict()
        json.dumps(data)

        assert data["num_joints"] == 6
        assert data["num_channels"] == 15
        assert data["hierarchy"]["name"] == "Hips"
        assert [c["name"] for c in data["hierarchy"]["children"]] == ["Spine", "LeftUpLeg"]
        assert "motion" not in data["hierarchy"]

    def test_to_dict_with_motion(self, skeleton):
        data = skeleton.to_dict(include_motion=True)
        json.dumps(data)

        assert data["hierarchy"]["motion"][1] == [16.0, 17.0, 18.0, 19.0, 20.0, 21.0]
