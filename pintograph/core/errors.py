# -*- coding: utf-8 -*-
"""Error types shared by the solver, the driver and the host layer."""

from __future__ import annotations

from typing import Optional


class LinkageError(Exception):
    pass


class ConfigurationError(LinkageError, ValueError):
    """Malformed host input (wrong list sizes, non-positive rods, bad ranges)."""


class GeometricInfeasibility(LinkageError):
    """Two rod constraints admit no real intersection.

    ``joint`` and ``t`` are filled in by the chain evaluator so the host can
    tell which joint failed and when.
    """

    def __init__(
        self,
        message: str,
        distance: float = float("nan"),
        l1: float = float("nan"),
        l2: float = float("nan"),
        joint: Optional[str] = None,
        t: Optional[float] = None,
    ):
        super().__init__(message)
        self.distance = float(distance)
        self.l1 = float(l1)
        self.l2 = float(l2)
        self.joint = joint
        self.t = t

    def at(self, joint: str, t: float) -> "GeometricInfeasibility":
        self.joint = joint
        self.t = float(t)
        return self

    def __str__(self) -> str:
        msg = super().__str__()
        if self.joint is None:
            return msg
        if self.t is None:
            return f"{self.joint}: {msg}"
        return f"{self.joint} at t={self.t:.6g}: {msg}"


class NumericDegeneracy(GeometricInfeasibility):
    """Both anchors coincide, the intersection direction is undefined."""
