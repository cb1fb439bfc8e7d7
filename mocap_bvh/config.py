"""
Configuration system for the BVH parser.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal

import yaml

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ParserConfig:
    """Parser and loader configuration."""

    # Text encoding used when opening files
    encoding: str = "utf-8"

    # Maximum joint nesting depth (ROOT is depth 0)
    max_depth: int = 128

    # Largest accepted "Frames:" count
    max_frames: int = 1_000_000

    # What to do with tokens left after the last motion frame
    trailing_data: Literal["ignore", "warn", "error"] = "warn"

    # Glob used when loading a directory
    file_pattern: str = "*.bvh"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: Path) -> "ParserConfig":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)

        if not data:
            return cls()

        # A nested "parser" section is accepted as well as a flat mapping
        if "parser" in data:
            data = data["parser"]

        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        data = {"parser": dict(self.__dict__)}

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate configuration and return list of problems."""
        issues = []

        for name in ("encoding", "trailing_data", "file_pattern", "log_level"):
            if not isinstance(getattr(self, name), str):
                issues.append(f"{name} must be a string, got {getattr(self, name)!r}")
        for name in ("max_depth", "max_frames"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                issues.append(f"{name} must be an integer, got {value!r}")
        if issues:
            return issues

        if self.max_depth < 1:
            issues.append(f"max_depth must be at least 1, got {self.max_depth}")
        elif self.max_depth > sys.getrecursionlimit() // 2:
            issues.append(
                f"max_depth {self.max_depth} is too close to the interpreter recursion limit "
                f"({sys.getrecursionlimit()})"
            )

        if self.max_frames < 0:
            issues.append(f"max_frames must not be negative, got {self.max_frames}")

        if self.trailing_data not in ("ignore", "warn", "error"):
            issues.append(f"Unknown trailing_data policy: {self.trailing_data}")

        if self.log_level.upper() not in LOG_LEVELS:
            issues.append(f"Unknown log level: {self.log_level}")

        try:
            "".encode(self.encoding)
        except LookupError:
            issues.append(f"Unknown encoding: {self.encoding}")

        return issues
