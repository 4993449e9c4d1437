# -*- coding: utf-8 -*-
"""Pintograph linkage model and chain evaluation.

Joint naming follows the drawing machine::

    A, B   crank pins on the edge of disk 1 / disk 2
    H      rods A-H and B-H meet here
    C, D   rods A-H and B-H continued past H
    E      rods C-E and D-E meet here
    P      pen, rod C-E continued past E (dynamic variant only)

Rod lengths are given in that order: ``[AH, BH, HC, HD, CE, DE(, EP)]``.
The static variant uses six rods and traces E, the dynamic (animated)
variant uses seven and traces P.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, GeometricInfeasibility
from .geometry import Point, extend_rod, intersect_circles, polar_point, scale_about

Segment = Tuple[Point, Point]
Circle = Tuple[Point, float]

STATIC = "static"
DYNAMIC = "dynamic"

ROD_COUNTS = {STATIC: 6, DYNAMIC: 7}
ROD_NAMES = ("AH", "BH", "HC", "HD", "CE", "DE", "EP")

# Branch choice per intersection joint.
H_BRANCH = 0
E_BRANCH = 1


class Direction(enum.Enum):
    CW = -1
    CCW = 1

    @property
    def sign(self) -> int:
        return int(self.value)

    @classmethod
    def from_host(cls, value) -> "Direction":
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
            raise ConfigurationError(f"Unknown disk direction: {value!r}")
        # Host toggles: True/1 is counter-clockwise, False/0 clockwise.
        if isinstance(value, (bool, np.bool_)) or (isinstance(value, (int, np.integer)) and value in (0, 1)):
            return cls.CCW if value else cls.CW
        raise ConfigurationError(f"Unknown disk direction: {value!r}")


@dataclass(frozen=True)
class Disk:
    center: Point
    radius: float
    speed: float
    direction: Direction = Direction.CCW

    def angle(self, t: float) -> float:
        return self.speed * float(t) * self.direction.sign

    def edge_point(self, t: float) -> Point:
        return polar_point(self.center, self.radius, self.angle(t))


@dataclass(frozen=True)
class RodLengths:
    ah: float
    bh: float
    hc: float
    hd: float
    ce: float
    de: float
    ep: Optional[float] = None

    @classmethod
    def from_list(cls, values: Sequence[float], variant: str = DYNAMIC) -> "RodLengths":
        if variant not in ROD_COUNTS:
            raise ConfigurationError(f"Unknown linkage variant: {variant!r}")
        expected = ROD_COUNTS[variant]
        vals = list(values or [])
        if len(vals) != expected:
            raise ConfigurationError(
                f"{variant} linkage needs exactly {expected} rod lengths, got {len(vals)}"
            )
        try:
            vals = [float(v) for v in vals]
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Rod lengths must be numbers: {exc}") from exc
        for name, v in zip(ROD_NAMES, vals):
            if not math.isfinite(v):
                raise ConfigurationError(f"Rod {name} must be finite, got {v}")
        for name, v in zip(ROD_NAMES[:6], vals[:6]):
            if not v > 0.0:
                raise ConfigurationError(f"Rod {name} must be positive, got {v}")
        if expected == 7 and not vals[6] >= 0.0:
            raise ConfigurationError(f"Rod EP must not be negative, got {vals[6]}")
        return cls(*vals)

    def to_list(self) -> List[float]:
        vals = [self.ah, self.bh, self.hc, self.hd, self.ce, self.de]
        if self.ep is not None:
            vals.append(self.ep)
        return vals


def _pair(name: str, values: Sequence) -> list:
    vals = list(values or [])
    if len(vals) != 2:
        raise ConfigurationError(f"Expected exactly 2 disk {name}, got {len(vals)}")
    return vals


@dataclass(frozen=True)
class LinkageConfig:
    distance: float
    disks: Tuple[Disk, Disk]
    rods: RodLengths

    @property
    def variant(self) -> str:
        return STATIC if self.rods.ep is None else DYNAMIC

    @classmethod
    def from_host(
        cls,
        distance: float,
        radii: Sequence[float],
        speeds: Sequence[float],
        directions: Sequence,
        rod_lengths: Sequence[float],
        variant: str = DYNAMIC,
    ) -> "LinkageConfig":
        """Build and validate a configuration from the host's flat lists."""
        radii = _pair("radii", radii)
        speeds = _pair("speeds", speeds)
        directions = _pair("directions", directions)
        rods = RodLengths.from_list(rod_lengths, variant)
        try:
            distance = float(distance)
            radii = [float(r) for r in radii]
            speeds = [float(s) for s in speeds]
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Disk parameters must be numbers: {exc}") from exc
        if not all(math.isfinite(v) for v in (distance, *radii, *speeds)):
            raise ConfigurationError(
                f"Disk parameters must be finite: distance={distance}, radii={radii}, speeds={speeds}"
            )
        disks = (
            Disk((0.0, 0.0), radii[0], speeds[0], Direction.from_host(directions[0])),
            Disk((distance, 0.0), radii[1], speeds[1], Direction.from_host(directions[1])),
        )
        return cls(distance=distance, disks=disks, rods=rods)


@dataclass(frozen=True)
class LinkageChain:
    """All joints of the linkage at one instant plus the drawable geometry."""

    t: float
    joints: Mapping[str, Point]
    circles: Tuple[Circle, Circle]
    segments: Tuple[Segment, ...]
    pen: Point
    intersections: Tuple[Point, Point] = field(default=((0.0, 0.0), (0.0, 0.0)))

    def __post_init__(self):
        # Read-only view over a private copy; a chain is never edited in place.
        object.__setattr__(self, "joints", MappingProxyType(dict(self.joints)))

    def __getitem__(self, name: str) -> Point:
        return self.joints[name]

    def as_array(self) -> np.ndarray:
        return np.asarray(list(self.joints.values()), dtype=float)

    def scaled(self, center: Point, factor: float) -> "LinkageChain":
        def sp(p: Point) -> Point:
            q = scale_about([p], center, factor)[0]
            return float(q[0]), float(q[1])

        joints = {k: sp(v) for k, v in self.joints.items()}
        circles = tuple((sp(c), abs(factor) * r) for c, r in self.circles)
        segments = tuple((sp(a), sp(b)) for a, b in self.segments)
        return LinkageChain(
            t=self.t,
            joints=joints,
            circles=circles,
            segments=segments,
            pen=sp(self.pen),
            intersections=(sp(self.intersections[0]), sp(self.intersections[1])),
        )


def _intersect(joint: str, t: float, p1: Point, l1: float, p2: Point, l2: float, branch: int) -> Point:
    try:
        return intersect_circles(p1, l1, p2, l2, branch)
    except GeometricInfeasibility as exc:
        exc.at(joint, t)
        raise


def evaluate_chain(config: LinkageConfig, t: float) -> LinkageChain:
    """Solve every joint of ``config`` at phase ``t``.

    Pure: the same inputs always give the same chain. Raises
    GeometricInfeasibility naming the joint that could not be placed.
    """
    t = float(t)
    rods = config.rods
    disk1, disk2 = config.disks

    A = disk1.edge_point(t)
    B = disk2.edge_point(t)
    H = _intersect("H", t, A, rods.ah, B, rods.bh, H_BRANCH)
    C = extend_rod(H, A, rods.hc / rods.ah)
    D = extend_rod(H, B, rods.hd / rods.bh)
    E = _intersect("E", t, C, rods.ce, D, rods.de, E_BRANCH)

    joints: Dict[str, Point] = {"A": A, "B": B, "H": H, "C": C, "D": D, "E": E}
    pen = E
    if rods.ep is not None:
        pen = extend_rod(E, C, rods.ep / rods.ce)
        joints["P"] = pen

    segments = (
        (A, C),
        (B, D),
        (H, C),
        (H, D),
        (C, pen),
        (D, E),
    )
    circles = ((disk1.center, disk1.radius), (disk2.center, disk2.radius))
    return LinkageChain(
        t=t,
        joints=joints,
        circles=circles,
        segments=segments,
        pen=pen,
        intersections=(H, E),
    )


def try_evaluate_chain(
    config: LinkageConfig, t: float
) -> Tuple[Optional[LinkageChain], Optional[GeometricInfeasibility]]:
    """Evaluate the chain.

    Returns (chain, error). If evaluation fails, chain is None.
    """
    try:
        return evaluate_chain(config, t), None
    except GeometricInfeasibility as exc:
        return None, exc


def evaluate_static(
    distance: float,
    radii: Sequence[float],
    speeds: Sequence[float],
    directions: Sequence,
    rod_lengths: Sequence[float],
    time: float,
) -> LinkageChain:
    """Single solve at an explicit time, picking the variant from the rod count."""
    variant = DYNAMIC if len(list(rod_lengths or [])) == ROD_COUNTS[DYNAMIC] else STATIC
    config = LinkageConfig.from_host(distance, radii, speeds, directions, rod_lengths, variant)
    return evaluate_chain(config, time)
