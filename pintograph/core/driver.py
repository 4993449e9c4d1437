# -*- coding: utf-8 -*-
"""Time-stepping animation driver.

The driver owns the run state and the traced path. It never schedules itself:
the host (a QTimer, an event loop, a test) calls :meth:`AnimationDriver.tick`
and calls it again while the returned result asks to be rescheduled.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence

import numpy as np

from .errors import ConfigurationError, GeometricInfeasibility, LinkageError
from .geometry import Point
from .linkage import DYNAMIC, LinkageChain, LinkageConfig, evaluate_chain

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class SimulationState:
    phase: Phase = Phase.IDLE
    elapsed: float = 0.0
    runtime_limit: float = 0.0
    baseline: Optional[float] = None
    # Phase of the most recent traced point; used to keep drawing a stopped run.
    last_t: Optional[float] = None

    @property
    def running(self) -> bool:
        return self.phase is Phase.RUNNING


class PathBuffer:
    """Append-only list of pen positions for one run."""

    def __init__(self):
        self._points: List[Point] = []

    def append(self, p: Point) -> None:
        self._points.append((float(p[0]), float(p[1])))

    def clear(self) -> None:
        self._points.clear()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(tuple(self._points))

    @property
    def points(self) -> tuple:
        return tuple(self._points)

    def as_array(self) -> np.ndarray:
        if not self._points:
            return np.zeros((0, 2), dtype=float)
        return np.asarray(self._points, dtype=float)


@dataclass
class HostInputs:
    """Everything the host supplies for one tick of the animated linkage."""

    distance: float
    radii: Sequence[float]
    speeds: Sequence[float]
    directions: Sequence
    rod_lengths: Sequence[float]
    start: bool = False
    reset: bool = False
    runtime: float = 0.0

    def config(self) -> LinkageConfig:
        return LinkageConfig.from_host(
            self.distance, self.radii, self.speeds, self.directions, self.rod_lengths, DYNAMIC
        )


@dataclass
class TickResult:
    phase: Phase
    elapsed: float
    chain: Optional[LinkageChain] = None
    path: Optional[np.ndarray] = None
    error: Optional[LinkageError] = None
    reschedule: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class AnimationDriver:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.state = SimulationState()
        self.path = PathBuffer()

    def reset(self) -> None:
        if self.state.phase is not Phase.IDLE or len(self.path):
            logger.info("Reset after %d traced points", len(self.path))
        self.state = SimulationState()
        self.path.clear()

    def _result(self, **kwargs) -> TickResult:
        return TickResult(phase=self.state.phase, elapsed=self.state.elapsed, **kwargs)

    def tick(self, inputs: HostInputs) -> TickResult:
        if inputs.reset:
            self.reset()
            return self._result()

        try:
            config = inputs.config()
            runtime = float(inputs.runtime)
        except (ConfigurationError, TypeError, ValueError) as exc:
            err = exc if isinstance(exc, ConfigurationError) else ConfigurationError(str(exc))
            logger.error("Invalid linkage configuration: %s", err)
            return self._result(error=err)

        st = self.state
        if st.phase is Phase.IDLE:
            if not inputs.start:
                return self._result()
            st.phase = Phase.RUNNING
            st.baseline = self._clock()
            st.elapsed = 0.0
            st.runtime_limit = runtime
            logger.info("Run started (runtime limit %.3g s)", runtime)

        if st.phase is Phase.RUNNING:
            if not inputs.start:
                self._stop("start withdrawn")
            else:
                st.runtime_limit = runtime
                st.elapsed = self._clock() - float(st.baseline)
                if st.elapsed > st.runtime_limit:
                    self._stop("runtime limit reached")

        if st.phase is Phase.STOPPED:
            return self._stopped_result(config)
        return self._advance(config)

    def _stop(self, reason: str) -> None:
        self.state.phase = Phase.STOPPED
        logger.info("Run stopped (%s) with %d traced points", reason, len(self.path))

    def _advance(self, config: LinkageConfig) -> TickResult:
        t = self.state.elapsed
        try:
            chain = evaluate_chain(config, t)
        except GeometricInfeasibility as exc:
            logger.warning("Linkage infeasible: %s", exc)
            return self._result(error=exc, reschedule=True)
        self.path.append(chain.pen)
        self.state.last_t = t
        return self._result(chain=chain, path=self.path.as_array(), reschedule=True)

    def _stopped_result(self, config: LinkageConfig) -> TickResult:
        chain = None
        error = None
        if self.state.last_t is not None:
            try:
                chain = evaluate_chain(config, self.state.last_t)
            except GeometricInfeasibility as exc:
                # Rods were edited after the run stopped.
                logger.warning("Linkage infeasible: %s", exc)
                error = exc
        return self._result(chain=chain, path=self.path.as_array(), error=error)
