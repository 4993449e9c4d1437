# -*- coding: utf-8 -*-
"""Linkage settings: defaults, JSON load/save and expression resolution.

A settings file looks like::

    {
      "parameters": [{"name": "L", "value": 10}],
      "distance": 10,
      "radii": [3, 2],
      "speeds": [1, -1.5],
      "directions": ["CCW", "CCW"],
      "rod_lengths": ["L", "L", "L", "L", "L", "L", 0],
      "runtime": 20,
      "sweep": {"start": 0, "end": "2*pi", "step": 0.05}
    }

Every number may be given as an expression over ``parameters``.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .driver import HostInputs
from .errors import ConfigurationError
from .linkage import DYNAMIC, ROD_COUNTS, STATIC, Direction, LinkageConfig
from .parameters import ParameterRegistry

logger = logging.getLogger(__name__)


def _default_sweep() -> Dict[str, Any]:
    return {"start": 0.0, "end": "2*pi", "step": 0.05}


@dataclass
class LinkageSettings:
    parameters: List[Dict[str, Any]] = field(default_factory=list)
    distance: Any = 10.0
    radii: List[Any] = field(default_factory=lambda: [3.0, 2.0])
    speeds: List[Any] = field(default_factory=lambda: [1.0, -1.5])
    directions: List[Any] = field(default_factory=lambda: ["CCW", "CCW"])
    rod_lengths: List[Any] = field(default_factory=lambda: [10.0, 10.0, 10.0, 10.0, 10.0, 10.0, 0.0])
    runtime: Any = 20.0
    sweep: Dict[str, Any] = field(default_factory=_default_sweep)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": copy.deepcopy(self.parameters),
            "distance": self.distance,
            "radii": list(self.radii),
            "speeds": list(self.speeds),
            "directions": [d.name if isinstance(d, Direction) else d for d in self.directions],
            "rod_lengths": list(self.rod_lengths),
            "runtime": self.runtime,
            "sweep": dict(self.sweep),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinkageSettings":
        base = cls()
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"settings: expected an object, got {type(data).__name__}")

        def list_field(key: str, default: List[Any]) -> List[Any]:
            value = data.get(key)
            if value is None:
                value = default
            if not isinstance(value, list):
                raise ConfigurationError(f"{key}: expected a list, got {value!r}")
            return list(value)

        sweep = dict(base.sweep)
        sweep_data = data.get("sweep") or {}
        if not isinstance(sweep_data, dict):
            raise ConfigurationError(f"sweep: expected an object, got {sweep_data!r}")
        sweep.update(sweep_data)
        parameters = list_field("parameters", [])
        for i, item in enumerate(parameters):
            if not isinstance(item, dict):
                raise ConfigurationError(f"parameters[{i}]: expected an object, got {item!r}")
        return cls(
            parameters=parameters,
            distance=data.get("distance", base.distance),
            radii=list_field("radii", base.radii),
            speeds=list_field("speeds", base.speeds),
            directions=list_field("directions", base.directions),
            rod_lengths=list_field("rod_lengths", base.rod_lengths),
            runtime=data.get("runtime", base.runtime),
            sweep=sweep,
        )

    def registry(self) -> ParameterRegistry:
        reg = ParameterRegistry()
        reg.load_list(self.parameters)
        return reg

    def resolve(self) -> "ResolvedSettings":
        """Evaluate every field to plain numbers.

        Cardinalities are checked here too, so a bad file fails before a run
        starts rather than on the first tick.
        """
        reg = self.registry()

        def nums(label: str, values: List[Any]) -> List[float]:
            return [reg.resolve(v, f"{label}[{i}]") for i, v in enumerate(values or [])]

        if len(self.rod_lengths or []) not in ROD_COUNTS.values():
            raise ConfigurationError(
                f"rod_lengths needs {ROD_COUNTS[STATIC]} or {ROD_COUNTS[DYNAMIC]} entries, "
                f"got {len(self.rod_lengths or [])}"
            )
        resolved = ResolvedSettings(
            distance=reg.resolve(self.distance, "distance"),
            radii=nums("radii", self.radii),
            speeds=nums("speeds", self.speeds),
            directions=[Direction.from_host(d) for d in self.directions or []],
            rod_lengths=nums("rod_lengths", self.rod_lengths),
            runtime=reg.resolve(self.runtime, "runtime"),
            sweep_start=reg.resolve(self.sweep.get("start", 0.0), "sweep.start"),
            sweep_end=reg.resolve(self.sweep.get("end", 0.0), "sweep.end"),
            sweep_step=reg.resolve(self.sweep.get("step", 0.0), "sweep.step"),
        )
        # Validates disk list sizes and rod signs.
        resolved.config()
        return resolved


@dataclass
class ResolvedSettings:
    distance: float
    radii: List[float]
    speeds: List[float]
    directions: List[Direction]
    rod_lengths: List[float]
    runtime: float
    sweep_start: float
    sweep_end: float
    sweep_step: float

    @property
    def variant(self) -> str:
        return DYNAMIC if len(self.rod_lengths) == ROD_COUNTS[DYNAMIC] else STATIC

    def config(self) -> LinkageConfig:
        return LinkageConfig.from_host(
            self.distance, self.radii, self.speeds, self.directions, self.rod_lengths, self.variant
        )

    def host_inputs(self, start: bool = False, reset: bool = False) -> HostInputs:
        return HostInputs(
            distance=self.distance,
            radii=list(self.radii),
            speeds=list(self.speeds),
            directions=list(self.directions),
            rod_lengths=list(self.rod_lengths),
            start=start,
            reset=reset,
            runtime=self.runtime,
        )


def load_settings(path: str) -> LinkageSettings:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a JSON object")
    logger.info("Loaded settings from %s", path)
    return LinkageSettings.from_dict(data)


def save_settings(settings: LinkageSettings, path: str) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(settings.to_dict(), fh, indent=2)
    logger.info("Saved settings to %s", path)


def settings_or_default(path: Optional[str]) -> LinkageSettings:
    return load_settings(path) if path else LinkageSettings()
