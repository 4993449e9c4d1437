# -*- coding: utf-8 -*-
"""Main window + menus."""

from __future__ import annotations

import logging
import os
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QMainWindow, QGraphicsScene, QDockWidget, QStatusBar, QFileDialog, QMessageBox,
)

from ..core.errors import ConfigurationError
from ..core.settings import LinkageSettings, load_settings, save_settings
from .items import LinkageGraphics
from .sim_panel import SimulationPanel
from .view import LinkageView

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[LinkageSettings] = None, settings_path: Optional[str] = None):
        super().__init__()
        self.setWindowTitle("Pintograph")
        self.resize(1200, 800)
        self.scene = QGraphicsScene(-2000, -2000, 4000, 4000)
        self.view = LinkageView(self.scene)
        self.setCentralWidget(self.view)
        self.graphics = LinkageGraphics(self.scene)

        self.setStatusBar(QStatusBar())
        self.statusBar().showMessage("Idle")

        self.sim_dock = QDockWidget("Machine", self)
        self.sim_panel = SimulationPanel(self.graphics, settings, on_message=self.show_message)
        self.sim_dock.setWidget(self.sim_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.sim_dock)

        self.current_file: Optional[str] = None
        self._set_current_file(settings_path)
        self._build_menus()
        self.view.fit_all()

    def show_message(self, text: str) -> None:
        self.statusBar().showMessage(text, 5000)

    def _set_current_file(self, path: Optional[str]) -> None:
        self.current_file = path
        self.sim_panel.project_dir = os.path.dirname(os.path.abspath(path)) if path else None
        name = os.path.basename(path) if path else "untitled"
        self.setWindowTitle(f"Pintograph - {name}")

    def _build_menus(self):
        m_file = self.menuBar().addMenu("&File")
        act_open = QAction("Open Settings...", self)
        act_open.setShortcut(QKeySequence.StandardKey.Open)
        act_open.triggered.connect(self.file_open)
        act_save = QAction("Save Settings", self)
        act_save.setShortcut(QKeySequence.StandardKey.Save)
        act_save.triggered.connect(self.file_save)
        act_save_as = QAction("Save Settings As...", self)
        act_save_as.triggered.connect(self.file_save_as)
        act_quit = QAction("Quit", self)
        act_quit.setShortcut(QKeySequence.StandardKey.Quit)
        act_quit.triggered.connect(self.close)
        for act in (act_open, act_save, act_save_as):
            m_file.addAction(act)
        m_file.addSeparator()
        m_file.addAction(act_quit)

        m_view = self.menuBar().addMenu("&View")
        act_fit = QAction("Fit All", self)
        act_fit.setShortcut(QKeySequence("F"))
        act_fit.triggered.connect(self.view.fit_all)
        act_reset = QAction("Reset View", self)
        act_reset.triggered.connect(self.view.reset_view)
        m_view.addAction(act_fit)
        m_view.addAction(act_reset)

    def file_open(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open Settings", "", "JSON (*.json)")
        if not path:
            return
        try:
            settings = load_settings(path)
        except (OSError, ConfigurationError) as e:
            logger.error("Could not open %s: %s", path, e)
            QMessageBox.critical(self, "Open failed", str(e))
            return
        self.sim_panel.reset()
        self.sim_panel.apply_settings(settings)
        self._set_current_file(path)
        self.view.fit_all()

    def file_save(self):
        if not self.current_file:
            self.file_save_as()
            return
        self._save_to(self.current_file)

    def file_save_as(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save Settings", "", "JSON (*.json)")
        if not path:
            return
        if not path.lower().endswith(".json"):
            path += ".json"
        if self._save_to(path):
            self._set_current_file(path)

    def _save_to(self, path: str) -> bool:
        self.sim_panel.sync_settings_from_fields()
        try:
            save_settings(self.sim_panel.settings, path)
        except OSError as e:
            QMessageBox.critical(self, "Save failed", str(e))
            return False
        self.show_message(f"Saved {path}")
        return True
