# -*- coding: utf-8 -*-
"""Graphics items used in the QGraphicsScene."""

from __future__ import annotations

from typing import Dict, List, Optional

import numpy as np
from PyQt6.QtCore import Qt, QPointF, QRectF, QLineF
from PyQt6.QtGui import QPen, QPainterPath, QBrush
from PyQt6.QtWidgets import (
    QGraphicsScene,
    QGraphicsEllipseItem,
    QGraphicsLineItem,
    QGraphicsPathItem,
    QGraphicsSimpleTextItem,
)

from ..core.geometry import Point, scale_about
from ..core.linkage import LinkageChain
from ..utils.constants import DARK, GRAY, YELLOW, PURPLE, PATH, SCENE_SCALE


def to_scene(p: Point) -> QPointF:
    return QPointF(float(p[0]) * SCENE_SCALE, -float(p[1]) * SCENE_SCALE)


class TextMarker(QGraphicsSimpleTextItem):
    def __init__(self, text: str = ""):
        super().__init__(text)
        self.setZValue(30)
        self.setBrush(DARK)
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self.setAcceptHoverEvents(False)


class DiskItem(QGraphicsEllipseItem):
    def __init__(self):
        super().__init__()
        self.setZValue(-10)
        pen = QPen(GRAY, 1.5)
        pen.setCosmetic(True)
        self.setPen(pen)
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))

    def set_circle(self, center: Point, radius: float):
        c = to_scene(center)
        r = float(radius) * SCENE_SCALE
        self.setRect(QRectF(c.x() - r, c.y() - r, 2 * r, 2 * r))


class RodItem(QGraphicsLineItem):
    def __init__(self):
        super().__init__()
        self.setZValue(0)
        pen = QPen(DARK, 2.0)
        pen.setCosmetic(True)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        self.setPen(pen)

    def set_segment(self, a: Point, b: Point):
        self.setLine(QLineF(to_scene(a), to_scene(b)))


class JointItem(QGraphicsEllipseItem):
    def __init__(self, name: str):
        super().__init__(-4, -4, 8, 8)
        self.name = name
        self.setZValue(10)
        self.setBrush(PURPLE if name in ("P", "E") else YELLOW)
        self.setPen(QPen(Qt.GlobalColor.black, 1))
        self.setFlag(QGraphicsEllipseItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        self.label = TextMarker(name)
        self.label.setFlag(QGraphicsSimpleTextItem.GraphicsItemFlag.ItemIgnoresTransformations, True)

    def set_point(self, p: Point):
        pos = to_scene(p)
        self.setPos(pos)
        self.label.setPos(pos + QPointF(6, -18))


class PathItem(QGraphicsPathItem):
    """Polyline of the traced pen positions."""

    def __init__(self):
        super().__init__()
        self.setZValue(-5)
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        pen = QPen(PATH, 1.6)
        pen.setCosmetic(True)
        self.setPen(pen)
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        self.setAcceptHoverEvents(False)

    def set_polyline(self, pts: Optional[np.ndarray]):
        path = QPainterPath()
        if pts is not None and len(pts):
            xy = scale_about(pts, (0.0, 0.0), SCENE_SCALE)
            xy[:, 1] *= -1.0
            path.moveTo(QPointF(*xy[0]))
            for x, y in xy[1:]:
                path.lineTo(QPointF(x, y))
        self.setPath(path)


class LinkageGraphics:
    """Owns the scene items for one linkage and syncs them to a chain."""

    def __init__(self, scene: QGraphicsScene):
        self.scene = scene
        self.disks: List[DiskItem] = [DiskItem(), DiskItem()]
        self.rods: List[RodItem] = [RodItem() for _ in range(6)]
        self.joints: Dict[str, JointItem] = {}
        self.path = PathItem()
        for it in (*self.disks, *self.rods, self.path):
            scene.addItem(it)
        self.set_visible(False)

    def _joint(self, name: str) -> JointItem:
        item = self.joints.get(name)
        if item is None:
            item = JointItem(name)
            self.scene.addItem(item)
            self.scene.addItem(item.label)
            self.joints[name] = item
        return item

    def set_visible(self, visible: bool):
        for it in (*self.disks, *self.rods):
            it.setVisible(visible)
        for j in self.joints.values():
            j.setVisible(visible)
            j.label.setVisible(visible)

    def show_chain(self, chain: Optional[LinkageChain]):
        if chain is None:
            self.set_visible(False)
            return
        for item, (center, radius) in zip(self.disks, chain.circles):
            item.set_circle(center, radius)
        for item, (a, b) in zip(self.rods, chain.segments):
            item.set_segment(a, b)
        for name, p in chain.joints.items():
            self._joint(name).set_point(p)
        for name, item in self.joints.items():
            present = name in chain.joints
            item.setVisible(present)
            item.label.setVisible(present)
        for it in (*self.disks, *self.rods):
            it.setVisible(True)

    def show_path(self, pts: Optional[np.ndarray]):
        self.path.set_polyline(pts)
