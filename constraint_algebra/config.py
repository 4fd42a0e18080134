"""Configuration for the expression engine."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Literal, Optional

AngleUnit = Literal["radians", "degrees"]

_ANGLE_UNITS = ("radians", "degrees")


@dataclass
class EngineConfig:
    # unit of sin/cos arguments and asin/acos results in parsed text
    angle_unit: AngleUnit = "radians"
    # let fold_constants drop x+0, x*1 and friends
    fold_identities: bool = False

    def __post_init__(self) -> None:
        if self.angle_unit not in _ANGLE_UNITS:
            raise ValueError(f"angle_unit must be one of {_ANGLE_UNITS}, got {self.angle_unit!r}")


@dataclass
class ParseOptions:
    """Per-call parser options; unset fields come from the engine config."""

    angle_unit: Optional[AngleUnit] = None
    allow_pi: bool = True

    def __post_init__(self) -> None:
        if self.angle_unit is not None and self.angle_unit not in _ANGLE_UNITS:
            raise ValueError(f"angle_unit must be one of {_ANGLE_UNITS}, got {self.angle_unit!r}")

    def effective_angle_unit(self) -> AngleUnit:
        if self.angle_unit is not None:
            return self.angle_unit
        return _ENGINE_CONFIG.angle_unit


_ENGINE_CONFIG = EngineConfig()


def get_engine_config() -> EngineConfig:
    return copy.deepcopy(_ENGINE_CONFIG)


def set_engine_config(config: EngineConfig) -> None:
    global _ENGINE_CONFIG
    _ENGINE_CONFIG = copy.deepcopy(config)


def fold_identities_enabled() -> bool:
    return _ENGINE_CONFIG.fold_identities


__all__ = [
    "AngleUnit",
    "EngineConfig",
    "ParseOptions",
    "get_engine_config",
    "set_engine_config",
    "fold_identities_enabled",
]
