"""Build and version-control information taken from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

_SHORT_HASH_LEN = 7


@dataclass(frozen=True)
class BuildInfo:
    """Version, profile and features of the running build."""

    version: str = ""
    profile: str = ""
    features: str = ""

    @classmethod
    def from_env(cls) -> BuildInfo:
        return cls(
            version=os.environ.get("VERGEN_BUILD_SEMVER", ""),
            profile=os.environ.get("VERGEN_CARGO_PROFILE", ""),
            features=os.environ.get("VERGEN_CARGO_FEATURES", ""),
        )


@dataclass(frozen=True)
class GitInfo:
    """Commit hash and tag the build was made from."""

    hash: str = ""
    tag: str = ""

    @classmethod
    def from_env(cls) -> GitInfo:
        return cls(
            hash=os.environ.get("VERGEN_GIT_SHA", ""),
            tag=os.environ.get("VERGEN_GIT_SEMVER", ""),
        )

    def short_hash(self) -> str:
        """The first seven characters of the commit hash."""
        return self.hash[:_SHORT_HASH_LEN]


@dataclass(frozen=True)
class CompileInfo:
    """Entry point to build and git information."""

    def build(self) -> BuildInfo:
        return BuildInfo.from_env()

    def git(self) -> GitInfo:
        return GitInfo.from_env()