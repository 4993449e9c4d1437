# -*- coding: utf-8 -*-
"""Headless simulation utilities: phase sweeps and a driver loop without a GUI."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from .driver import AnimationDriver, HostInputs, TickResult
from .errors import ConfigurationError
from .linkage import LinkageConfig, try_evaluate_chain

logger = logging.getLogger(__name__)


@dataclass
class SweepSettings:
    start: float
    end: float
    step: float

    def phases(self) -> np.ndarray:
        if self.step == 0 or not math.isfinite(self.step):
            raise ConfigurationError("Sweep step must be a non-zero number")
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise ConfigurationError(f"Sweep range must be finite, got {self.start}..{self.end}")
        if (self.end - self.start) * self.step < 0:
            raise ConfigurationError(
                f"Sweep step {self.step} does not lead from {self.start} to {self.end}"
            )
        n = int(math.floor((self.end - self.start) / self.step + 1e-9))
        return self.start + self.step * np.arange(n + 1)


@dataclass
class SweepResult:
    records: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def trace(self) -> np.ndarray:
        pts = [(r["x"], r["y"]) for r in self.records if r["ok"]]
        if not pts:
            return np.zeros((0, 2), dtype=float)
        return np.asarray(pts, dtype=float)

    @property
    def failures(self) -> int:
        return sum(1 for r in self.records if not r["ok"])


def sweep(config: LinkageConfig, start: float, end: float, step: float) -> SweepResult:
    """Evaluate the chain at every phase of ``start..end`` (inclusive when hit).

    Infeasible phases are recorded with ``ok=False`` and the error text; the
    sweep carries on past them.
    """
    result = SweepResult()
    for t in SweepSettings(float(start), float(end), float(step)).phases():
        chain, err = try_evaluate_chain(config, float(t))
        if chain is None:
            result.records.append({"t": float(t), "ok": False, "x": None, "y": None, "error": str(err)})
            continue
        x, y = chain.pen
        result.records.append({"t": float(t), "ok": True, "x": x, "y": y, "error": ""})
    if result.failures:
        logger.warning("Sweep: %d of %d phases infeasible", result.failures, len(result.records))
    return result


def run_driver(driver: AnimationDriver, inputs: HostInputs, max_ticks: int = 10000) -> List[TickResult]:
    """Tick ``driver`` until it stops asking to be rescheduled.

    This is the scheduler loop a GUI timer would otherwise provide. The loop
    is bounded by ``max_ticks``; ``inputs`` is read fresh on every tick so the
    caller may flip ``start``/``reset`` between calls.
    """
    results: List[TickResult] = []
    for _ in range(int(max_ticks)):
        res = driver.tick(inputs)
        results.append(res)
        if not res.reschedule:
            break
    return results
