# -*- coding: utf-8 -*-
"""Named parameters + safe expression evaluation for linkage settings.

Any numeric setting may be written as an expression over the registered
names, so a family of machines can be described by a handful of values
(for example every rod as a multiple of ``L``).

Implementation notes
--------------------
- Expressions are parsed with SymPy, never Python ``eval``.
- Only a small set of functions/constants is exposed.
- Unknown symbols are evaluation errors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import sympy as sp

from .errors import ConfigurationError


_ALLOWED_FUNCS: Dict[str, Any] = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "atan": sp.atan,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
    "min": sp.Min,
    "max": sp.Max,
    "pi": sp.pi,
}


def _is_valid_param_name(name: str) -> bool:
    name = (name or "").strip()
    if not name or name in _ALLOWED_FUNCS:
        return False
    if not (name[0].isalpha() or name[0] == "_"):
        return False
    return all(ch.isalnum() or ch == "_" for ch in name)


def eval_expression(expr: str, params: Dict[str, float]) -> Tuple[Optional[float], Optional[str]]:
    """Evaluate ``expr`` with ``params`` bound.

    Returns (value, error_message). If evaluation fails, value is None.
    """
    expr = (expr or "").strip()
    if not expr:
        return None, "Empty expression"

    symbols = {name: sp.Symbol(name) for name in params}
    try:
        parsed = sp.sympify(expr, locals={**_ALLOWED_FUNCS, **symbols})
    except (sp.SympifyError, SyntaxError, TypeError, ValueError) as ex:
        return None, f"Parse error: {ex}"

    unknown = sorted(str(s) for s in getattr(parsed, "free_symbols", set()) if str(s) not in params)
    if unknown:
        return None, f"Unknown symbol(s): {', '.join(unknown)}"

    try:
        val = float(parsed.evalf(subs={symbols[k]: float(v) for k, v in params.items()}))
    except (TypeError, ValueError) as ex:
        return None, f"Eval error: {ex}"
    if math.isnan(val) or math.isinf(val):
        return None, "Expression is not a finite number"
    return val, None


@dataclass
class ParameterRegistry:
    """Name -> value table that settings expressions are evaluated against."""

    params: Dict[str, float] = field(default_factory=dict)

    def set_param(self, name: str, value: float):
        if not _is_valid_param_name(name):
            raise ConfigurationError(f"Invalid parameter name: {name!r}")
        try:
            self.params[str(name).strip()] = float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Parameter {name!r} must be a number") from exc

    def delete_param(self, name: str):
        self.params.pop(name, None)

    def to_list(self) -> list[dict[str, Any]]:
        return [{"name": k, "value": float(v)} for k, v in sorted(self.params.items())]

    def load_list(self, items: list[dict[str, Any]]):
        self.params.clear()
        for it in items or []:
            self.set_param(str(it.get("name", "")), it.get("value", 0.0))

    def resolve(self, value: Any, label: str = "value") -> float:
        """Turn a number or expression string into a float.

        Raises ConfigurationError naming ``label`` when the value cannot be
        evaluated.
        """
        if isinstance(value, bool):
            raise ConfigurationError(f"{label}: expected a number, got {value!r}")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            val, err = eval_expression(value, self.params)
            if err is not None:
                raise ConfigurationError(f"{label}: {err}")
            return float(val)
        raise ConfigurationError(f"{label}: expected a number or expression, got {value!r}")
