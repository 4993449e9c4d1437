# -*- coding: utf-8 -*-
"""Graphics view interaction (pan/zoom)."""

from __future__ import annotations

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsView, QGraphicsScene

from ..utils.qt_safe import safe_event


class LinkageView(QGraphicsView):
    def __init__(self, scene: QGraphicsScene):
        super().__init__(scene)
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self._pan = False
        self._pan_start = QPointF()

    def wheelEvent(self, e):
        f = 1.25 if e.angleDelta().y() > 0 else 0.8
        self.scale(f, f)

    @safe_event
    def mousePressEvent(self, e):
        if e.button() in (Qt.MouseButton.RightButton, Qt.MouseButton.MiddleButton):
            self._pan = True
            self._pan_start = e.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            e.accept(); return
        super().mousePressEvent(e)

    @safe_event
    def mouseMoveEvent(self, e):
        if self._pan:
            d = e.position() - self._pan_start
            self.horizontalScrollBar().setValue(self.horizontalScrollBar().value() - int(d.x()))
            self.verticalScrollBar().setValue(self.verticalScrollBar().value() - int(d.y()))
            self._pan_start = e.position()
            e.accept(); return
        super().mouseMoveEvent(e)

    @safe_event
    def mouseReleaseEvent(self, e):
        if self._pan and e.button() in (Qt.MouseButton.RightButton, Qt.MouseButton.MiddleButton):
            self._pan = False
            self.setCursor(Qt.CursorShape.ArrowCursor)
            e.accept(); return
        super().mouseReleaseEvent(e)

    def reset_view(self):
        self.resetTransform()
        self.centerOn(0, 0)

    def fit_all(self):
        rect = self.scene().itemsBoundingRect()
        if rect.isNull():
            return
        pad = 40
        r = QRectF(rect.left() - pad, rect.top() - pad, rect.width() + 2 * pad, rect.height() + 2 * pad)
        self.fitInView(r, Qt.AspectRatioMode.KeepAspectRatio)
