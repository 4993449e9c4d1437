# -*- coding: utf-8 -*-
"""Application entry point.

``pintograph [settings.json]`` opens the viewer. ``--headless`` runs a phase
sweep without Qt and optionally saves it with ``--out DIR``. ``--pattern N``
samples the two-disk epicycle pattern in N steps instead of the linkage.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .core.errors import ConfigurationError
from .core.headless_sim import sweep
from .core.pattern import epicycle_pattern
from .core.run_store import RunStore
from .core.settings import settings_or_default
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pintograph", description="Pintograph linkage simulator")
    parser.add_argument("settings", nargs="?", help="settings JSON file")
    parser.add_argument("--headless", action="store_true", help="run the configured sweep without a window")
    parser.add_argument("--pattern", type=float, metavar="STEPS",
                        help="with --headless: sample the epicycle pattern instead of the linkage")
    parser.add_argument("--out", help="directory to save the headless run in")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", help="also write the log to this file")
    return parser.parse_args(argv)


def run_headless(settings_path: Optional[str], out_dir: Optional[str]) -> int:
    try:
        settings = settings_or_default(settings_path)
        resolved = settings.resolve()
        result = sweep(resolved.config(), resolved.sweep_start, resolved.sweep_end, resolved.sweep_step)
    except (OSError, ConfigurationError) as exc:
        logger.error("%s", exc)
        return 2
    logger.info("Sweep: %d samples, %d infeasible", len(result.records), result.failures)
    if out_dir:
        status = {"kind": "sweep", "success": result.failures == 0, "failures": result.failures}
        RunStore(out_dir).save_run(settings.to_dict(), result.records, status)
    return 0 if result.failures == 0 else 1


def run_pattern(settings_path: Optional[str], steps: float, out_dir: Optional[str]) -> int:
    try:
        settings = settings_or_default(settings_path)
        resolved = settings.resolve()
        (r1, r2), (s1, s2) = resolved.radii, resolved.speeds
        d1, d2 = (d.sign for d in resolved.directions)
        pts = epicycle_pattern(r1, s1 * d1, r2, s2 * d2, steps)
    except (OSError, ConfigurationError) as exc:
        logger.error("%s", exc)
        return 2
    logger.info("Pattern: %d points", len(pts))
    if out_dir:
        records = [{"i": i, "x": float(x), "y": float(y)} for i, (x, y) in enumerate(pts)]
        status = {"kind": "pattern", "success": True, "steps": len(pts) - 1}
        RunStore(out_dir).save_run(settings.to_dict(), records, status)
    return 0


def main(argv: Optional[List[str]] = None):
    args = _parse_args(argv)
    setup_logging(getattr(logging, str(args.log_level).upper(), logging.INFO), args.log_file)
    if args.headless:
        if args.pattern is not None:
            sys.exit(run_pattern(args.settings, args.pattern, args.out))
        sys.exit(run_headless(args.settings, args.out))

    from PyQt6.QtWidgets import QApplication
    from .ui.main_window import MainWindow

    try:
        settings = settings_or_default(args.settings)
    except (OSError, ConfigurationError) as exc:
        logger.error("%s", exc)
        sys.exit(2)
    app = QApplication(sys.argv[:1])
    w = MainWindow(settings, args.settings)
    w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
