# -*- coding: utf-8 -*-
"""Simulation dock: machine parameters, run controls, sweep and export.

The panel is the scheduler for :class:`AnimationDriver`: a QTimer calls
``tick`` and keeps firing only while the driver asks to be rescheduled.
"""

from __future__ import annotations

import csv
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel,
    QPushButton, QLineEdit, QComboBox, QFileDialog, QMessageBox, QGroupBox,
)

from ..core.driver import AnimationDriver, HostInputs, Phase, TickResult
from ..core.errors import ConfigurationError
from ..core.headless_sim import sweep
from ..core.linkage import DYNAMIC, ROD_NAMES, Direction, try_evaluate_chain
from ..core.run_store import RunStore
from ..core.settings import LinkageSettings, ResolvedSettings
from ..utils.constants import TICK_INTERVAL_MS
from ..utils.qt_safe import safe_slot
from .items import LinkageGraphics

logger = logging.getLogger(__name__)


def _fmt(v: Any) -> str:
    return v if isinstance(v, str) else f"{float(v):g}"


class SimulationPanel(QWidget):
    def __init__(
        self,
        graphics: LinkageGraphics,
        settings: Optional[LinkageSettings] = None,
        on_message: Optional[Callable[[str], None]] = None,
    ):
        super().__init__()
        self.graphics = graphics
        self.settings = settings or LinkageSettings()
        self._on_message = on_message
        self.project_dir: Optional[str] = None

        self.driver = AnimationDriver()
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_tick)
        self._start = False
        self._resolved: Optional[ResolvedSettings] = None
        self._records: List[Dict[str, Any]] = []
        self._run_status: Dict[str, Any] = {}

        layout = QVBoxLayout(self)

        # Disks
        disks = QGroupBox("Disks")
        grid = QGridLayout(disks)
        self.ed_distance = QLineEdit()
        grid.addWidget(QLabel("Distance"), 0, 0)
        grid.addWidget(self.ed_distance, 0, 1, 1, 3)
        grid.addWidget(QLabel("Radius"), 1, 1)
        grid.addWidget(QLabel("Speed"), 1, 2)
        grid.addWidget(QLabel("Direction"), 1, 3)
        self.ed_radius: List[QLineEdit] = []
        self.ed_speed: List[QLineEdit] = []
        self.cb_dir: List[QComboBox] = []
        for i in range(2):
            r, s, d = QLineEdit(), QLineEdit(), QComboBox()
            d.addItems([Direction.CCW.name, Direction.CW.name])
            grid.addWidget(QLabel(f"Disk {i + 1}"), 2 + i, 0)
            grid.addWidget(r, 2 + i, 1)
            grid.addWidget(s, 2 + i, 2)
            grid.addWidget(d, 2 + i, 3)
            self.ed_radius.append(r)
            self.ed_speed.append(s)
            self.cb_dir.append(d)
        layout.addWidget(disks)

        # Rods
        rods = QGroupBox("Rods")
        rgrid = QGridLayout(rods)
        self.ed_rods: List[QLineEdit] = []
        for i, name in enumerate(ROD_NAMES):
            ed = QLineEdit()
            rgrid.addWidget(QLabel(name), i // 4 * 2, i % 4)
            rgrid.addWidget(ed, i // 4 * 2 + 1, i % 4)
            self.ed_rods.append(ed)
        layout.addWidget(rods)

        # Run controls
        run_row = QHBoxLayout()
        self.ed_runtime = QLineEdit()
        self.ed_runtime.setMaximumWidth(80)
        run_row.addWidget(QLabel("Runtime (s)"))
        run_row.addWidget(self.ed_runtime)
        run_row.addStretch(1)
        layout.addLayout(run_row)

        btns = QHBoxLayout()
        self.btn_start = QPushButton("Start")
        self.btn_stop = QPushButton("Stop")
        self.btn_reset = QPushButton("Reset")
        btns.addWidget(self.btn_start)
        btns.addWidget(self.btn_stop)
        btns.addWidget(self.btn_reset)
        layout.addLayout(btns)

        # Sweep controls
        sweep_row = QHBoxLayout()
        self.ed_sweep_start = QLineEdit()
        self.ed_sweep_end = QLineEdit()
        self.ed_sweep_step = QLineEdit()
        sweep_row.addWidget(QLabel("t0"))
        sweep_row.addWidget(self.ed_sweep_start)
        sweep_row.addWidget(QLabel("t1"))
        sweep_row.addWidget(self.ed_sweep_end)
        sweep_row.addWidget(QLabel("dt"))
        sweep_row.addWidget(self.ed_sweep_step)
        layout.addLayout(sweep_row)

        out_btns = QHBoxLayout()
        self.btn_sweep = QPushButton("Sweep")
        self.btn_export = QPushButton("Export CSV")
        self.btn_save_run = QPushButton("Save Run")
        out_btns.addWidget(self.btn_sweep)
        out_btns.addWidget(self.btn_export)
        out_btns.addWidget(self.btn_save_run)
        layout.addLayout(out_btns)

        self.lbl_state = QLabel("Idle")
        layout.addWidget(self.lbl_state)
        layout.addStretch(1)

        self.btn_start.clicked.connect(self.start)
        self.btn_stop.clicked.connect(self.stop)
        self.btn_reset.clicked.connect(self.reset)
        self.btn_sweep.clicked.connect(self.run_sweep)
        self.btn_export.clicked.connect(self.export_csv)
        self.btn_save_run.clicked.connect(self.save_run)
        for ed in self._line_edits():
            ed.editingFinished.connect(self._on_field_changed)
        for cb in self.cb_dir:
            cb.currentIndexChanged.connect(self._on_field_changed)

        self.apply_settings(self.settings)

    def _line_edits(self) -> List[QLineEdit]:
        return [
            self.ed_distance, *self.ed_radius, *self.ed_speed, *self.ed_rods,
            self.ed_runtime, self.ed_sweep_start, self.ed_sweep_end, self.ed_sweep_step,
        ]

    def _message(self, text: str) -> None:
        if self._on_message:
            self._on_message(text)

    def _utc_now(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    # ---- settings <-> fields ----
    def apply_settings(self, settings: LinkageSettings) -> None:
        self.settings = settings
        self.ed_distance.setText(_fmt(settings.distance))
        for i in range(2):
            self.ed_radius[i].setText(_fmt(settings.radii[i]) if i < len(settings.radii) else "")
            self.ed_speed[i].setText(_fmt(settings.speeds[i]) if i < len(settings.speeds) else "")
            if i < len(settings.directions):
                try:
                    self.cb_dir[i].setCurrentText(Direction.from_host(settings.directions[i]).name)
                except ConfigurationError as exc:
                    self._message(f"Settings: {exc}")
        for i, ed in enumerate(self.ed_rods):
            ed.setText(_fmt(settings.rod_lengths[i]) if i < len(settings.rod_lengths) else "")
        self.ed_runtime.setText(_fmt(settings.runtime))
        self.ed_sweep_start.setText(_fmt(settings.sweep.get("start", 0.0)))
        self.ed_sweep_end.setText(_fmt(settings.sweep.get("end", 0.0)))
        self.ed_sweep_step.setText(_fmt(settings.sweep.get("step", 0.0)))
        self._on_field_changed()

    def sync_settings_from_fields(self) -> None:
        def val(ed: QLineEdit) -> Any:
            text = ed.text().strip()
            try:
                return float(text)
            except ValueError:
                return text

        s = self.settings
        s.distance = val(self.ed_distance)
        s.radii = [val(ed) for ed in self.ed_radius]
        s.speeds = [val(ed) for ed in self.ed_speed]
        s.directions = [cb.currentText() for cb in self.cb_dir]
        rods = [val(ed) for ed in self.ed_rods]
        # An empty EP field means the six-rod machine that traces E.
        s.rod_lengths = rods[:-1] if rods[-1] == "" else rods
        s.runtime = val(self.ed_runtime)
        s.sweep = {
            "start": val(self.ed_sweep_start),
            "end": val(self.ed_sweep_end),
            "step": val(self.ed_sweep_step),
        }

    def _resolve(self) -> Optional[ResolvedSettings]:
        self.sync_settings_from_fields()
        try:
            self._resolved = self.settings.resolve()
        except ConfigurationError as exc:
            self._resolved = None
            self._message(f"Settings: {exc}")
        return self._resolved

    @safe_slot
    def _on_field_changed(self) -> None:
        resolved = self._resolve()
        if resolved is None or self.driver.state.phase is not Phase.IDLE:
            return
        # Preview the machine at t=0 while idle.
        chain, err = try_evaluate_chain(resolved.config(), 0.0)
        self.graphics.show_chain(chain)
        if err is not None:
            self._message(f"Infeasible: {err}")

    def _inputs(self, reset: bool = False) -> HostInputs:
        if self._resolved is None:
            # Empty lists make the driver report a configuration error.
            return HostInputs(0.0, [], [], [], [], start=self._start, reset=reset)
        return self._resolved.host_inputs(start=self._start, reset=reset)

    # ---- run control ----
    def start(self):
        if self._resolve() is None:
            QMessageBox.warning(self, "Start", "Fix the settings before starting.")
            return
        if self.driver.state.phase is Phase.STOPPED:
            QMessageBox.information(self, "Start", "The last run is finished. Press Reset first.")
            return
        if self._resolved.variant != DYNAMIC:
            QMessageBox.warning(self, "Start", "The animation needs all 7 rod lengths.")
            return
        self._start = True
        if self.driver.state.phase is Phase.IDLE:
            self._records = []
            self._run_status = {"started_utc": self._utc_now()}
        # Do one immediate tick for responsiveness
        self._on_tick()

    def stop(self):
        self._start = False
        if self.driver.state.phase is Phase.RUNNING:
            self._on_tick()

    def reset(self):
        self._start = False
        self._timer.stop()
        self._handle(self.driver.tick(self._inputs(reset=True)))
        self.graphics.show_path(None)
        self._on_field_changed()

    @safe_slot
    def _on_tick(self):
        res = self.driver.tick(self._inputs())
        self._handle(res)
        if res.reschedule:
            if not self._timer.isActive():
                self._timer.start(TICK_INTERVAL_MS)
        elif self._timer.isActive():
            self._timer.stop()

    def _handle(self, res: TickResult) -> None:
        self.lbl_state.setText(f"{res.phase.value.capitalize()}  t={res.elapsed:.2f}s  points={len(self.driver.path)}")
        if res.phase is Phase.RUNNING:
            rec: Dict[str, Any] = {"t": res.elapsed, "ok": res.ok, "x": None, "y": None, "error": ""}
            if res.chain is not None:
                rec["x"], rec["y"] = res.chain.pen
            if res.error is not None:
                rec["error"] = str(res.error)
            self._records.append(rec)
        if res.error is not None:
            self._message(str(res.error))
            if res.chain is None:
                self.graphics.show_chain(None)
            return
        if res.chain is not None:
            self.graphics.show_chain(res.chain)
        if res.path is not None:
            self.graphics.show_path(res.path)
        if res.phase is Phase.STOPPED and "finished_utc" not in self._run_status and self._run_status:
            self._run_status.update({"finished_utc": self._utc_now(), "elapsed_sec": res.elapsed})
            self._message("Run finished (not saved)")

    # ---- sweep / export ----
    def run_sweep(self):
        resolved = self._resolve()
        if resolved is None:
            return
        if self.driver.state.phase is Phase.RUNNING:
            QMessageBox.information(self, "Sweep", "Stop the running animation first.")
            return
        try:
            result = sweep(resolved.config(), resolved.sweep_start, resolved.sweep_end, resolved.sweep_step)
        except ConfigurationError as exc:
            QMessageBox.warning(self, "Sweep", str(exc))
            return
        self._records = list(result.records)
        self._run_status = {
            "kind": "sweep",
            "started_utc": self._utc_now(),
            "finished_utc": self._utc_now(),
            "failures": result.failures,
        }
        self.graphics.show_path(result.trace)
        self._message(f"Sweep: {len(result.records)} samples, {result.failures} infeasible")

    def save_run(self) -> None:
        if not self._records:
            QMessageBox.information(self, "Run", "Nothing to save yet. Run or sweep first.")
            return
        store = RunStore(self.project_dir or os.getcwd())
        run_dir = store.save_run(self.settings.to_dict(), self._records, dict(self._run_status))
        self._message(f"Run saved to {run_dir}")

    def export_csv(self):
        if not self._records:
            QMessageBox.information(self, "Export", "No data yet. Run or sweep first.")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Export Path CSV", "", "CSV (*.csv)")
        if not path:
            return
        if not path.lower().endswith(".csv"):
            path += ".csv"

        cols = ["t", "ok", "x", "y", "error"]
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                w = csv.writer(f)
                w.writerow(cols)
                for r in self._records:
                    w.writerow([r.get(c) for c in cols])
        except OSError as e:
            QMessageBox.critical(self, "Export failed", str(e))
            return
        logger.info("Exported %d records to %s", len(self._records), path)
