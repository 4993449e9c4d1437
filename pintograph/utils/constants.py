# -*- coding: utf-8 -*-
"""UI constants and colors."""

from PyQt6.QtGui import QColor

DARK = QColor(40, 40, 40)
GRAY = QColor(160, 160, 160)
YELLOW = QColor(255, 230, 0)
PURPLE = QColor(160, 0, 160)
PATH = QColor(0, 120, 215, 160)

# Scene pixels per model unit. Model y points up, scene y points down.
SCENE_SCALE = 20.0

TICK_INTERVAL_MS = 15
