"""Environment-driven settings shared by the history engine and telemetry."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

ENV_PREFIX = "REWIND_ENGINE_"

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_ROOT_BRANCH = "main"
DEFAULT_BRANCH_PREFIX = "branch-"


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    raw = env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Knobs that shape branch naming for one ``VersionGraph``."""

    root_branch_id: str = DEFAULT_ROOT_BRANCH
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    logger_name: str = "rewind_engine.history"

    def __post_init__(self) -> None:
        if not self.root_branch_id:
            raise ValueError("root_branch_id cannot be empty")
        if not self.branch_prefix:
            raise ValueError("branch_prefix cannot be empty")

    @classmethod
    def from_env(cls, **overrides: str) -> "EngineSettings":
        """Read ``REWIND_ENGINE_*`` variables; keyword overrides win."""

        base = cls(
            root_branch_id=env("ROOT_BRANCH") or DEFAULT_ROOT_BRANCH,
            branch_prefix=env("BRANCH_PREFIX") or DEFAULT_BRANCH_PREFIX,
        )
        if overrides:
            return replace(base, **overrides)
        return base


__all__ = [
    "ENV_PREFIX",
    "EngineSettings",
    "env",
    "env_flag",
    "env_int",
]
