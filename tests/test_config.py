"""Tests for ParserConfig."""

import sys

import pytest

from mocap_bvh.config import ParserConfig


def test_defaults_are_valid():
    config = ParserConfig()
    assert config.validate() == []
    assert config.trailing_data == "warn"
    assert config.max_depth == 128
    assert config.max_frames == 1_000_000


def test_yaml_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    config = ParserConfig(max_depth=32, trailing_data="error", log_level="DEBUG")
    config.to_yaml(path)

    assert "parser:" in path.read_text()
    assert ParserConfig.from_yaml(path) == config


def test_flat_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_depth: 16\nencoding: latin-1\n")

    config = ParserConfig.from_yaml(path)
    assert config.max_depth == 16
    assert config.encoding == "latin-1"
    assert config.trailing_data == "warn"


def test_empty_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert ParserConfig.from_yaml(path) == ParserConfig()


def test_unknown_key(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("parser:\n  max_joints: 10\n")

    with pytest.raises(TypeError):
        ParserConfig.from_yaml(path)


@pytest.mark.parametrize(
    "kwargs, fragment",
    [
        ({"max_depth": 0}, "max_depth"),
        ({"max_depth": sys.getrecursionlimit()}, "recursion limit"),
        ({"trailing_data": "drop"}, "trailing_data"),
        ({"log_level": "LOUD"}, "log level"),
        ({"encoding": "no-such-codec"}, "encoding"),
        ({"max_frames": -1}, "max_frames"),
        ({"max_depth": "deep"}, "max_depth must be an integer"),
        ({"max_depth": True}, "max_depth must be an integer"),
        ({"max_frames": 1.5}, "max_frames must be an integer"),
        ({"log_level": 10}, "log_level must be a string"),
        ({"encoding": None}, "encoding must be a string"),
    ],
)
def test_validate(kwargs, fragment):
    issues = ParserConfig(**kwargs).validate()
    assert len(issues) == 1
    assert fragment in issues[0]
