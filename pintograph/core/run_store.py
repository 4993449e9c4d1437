# -*- coding: utf-8 -*-
"""Storage for finished sweeps and animation runs."""

from __future__ import annotations

import csv
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _write_json(path: str, payload: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, sort_keys=True)


class RunStore:
    """Writes each run to ``<directory>/runs/<run_id>/``.

    A run directory holds ``run.json`` (settings, status and a short
    summary) and ``path.csv`` (one row per record).
    """

    def __init__(self, directory: str):
        self.directory = directory
        self.runs_dir = os.path.join(directory, "runs")
        os.makedirs(self.runs_dir, exist_ok=True)

    def _new_run_dir(self) -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        run_dir = os.path.join(self.runs_dir, stamp)
        suffix = 1
        while os.path.exists(run_dir):
            suffix += 1
            run_dir = os.path.join(self.runs_dir, f"{stamp}_{suffix}")
        os.makedirs(run_dir)
        return run_dir

    def save_run(
        self,
        settings: Dict[str, Any],
        records: List[Dict[str, Any]],
        status: Dict[str, Any],
    ) -> str:
        run_dir = self._new_run_dir()

        fields: List[str] = []
        for rec in records:
            for key in rec.keys():
                if key not in fields:
                    fields.append(key)
        with open(os.path.join(run_dir, "path.csv"), "w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(fields)
            for rec in records:
                writer.writerow([rec.get(k) for k in fields])

        n_ok = sum(1 for r in records if r.get("ok", True))
        _write_json(
            os.path.join(run_dir, "run.json"),
            {
                "saved_utc": _utc_now(),
                "settings": settings,
                "status": status,
                "summary": {"records": len(records), "ok": n_ok, "failed": len(records) - n_ok},
            },
        )
        _write_json(os.path.join(self.runs_dir, "last_run.json"), {"path": run_dir})
        logger.info("Saved run with %d records to %s", len(records), run_dir)
        return run_dir

    def last_run_path(self) -> Optional[str]:
        path = os.path.join(self.runs_dir, "last_run.json")
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as fh:
                run_dir = json.load(fh).get("path")
        except (OSError, json.JSONDecodeError):
            logger.warning("Unreadable %s", path)
            return None
        if run_dir and os.path.isdir(run_dir):
            return run_dir
        return None
