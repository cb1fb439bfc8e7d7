"""Shared fixtures for the BVH parser tests."""

import pytest

from tests.samples import SINGLE_JOINT_BVH, WALK_BVH


@pytest.fixture
def walk_bvh() -> str:
    return WALK_BVH


@pytest.fixture
def walk_file(tmp_path):
    path = tmp_path / "walk.bvh"
    path.write_text(WALK_BVH)
    return path


@pytest.fixture
def bad_channel_file(tmp_path):
    path = tmp_path / "bad.bvh"
    path.write_text(SINGLE_JOINT_BVH.replace("Yposition", "Wposition"))
    return path
