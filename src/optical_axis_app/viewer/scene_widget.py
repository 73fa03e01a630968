"""OpenGL-powered preview of the subject as seen from the virtual camera."""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from loguru import logger
from OpenGL.GL import (
    GL_BLEND,
    GL_COLOR_BUFFER_BIT,
    GL_DEPTH_BUFFER_BIT,
    GL_DEPTH_TEST,
    GL_LINE_LOOP,
    GL_LINE_STRIP,
    GL_LINES,
    GL_MODELVIEW,
    GL_ONE_MINUS_SRC_ALPHA,
    GL_PROJECTION,
    GL_QUADS,
    GL_SRC_ALPHA,
    GL_TRIANGLE_STRIP,
    glBegin,
    glBlendFunc,
    glClear,
    glClearColor,
    glColor4f,
    glDepthMask,
    glDisable,
    glEnable,
    glEnd,
    glLineWidth,
    glLoadIdentity,
    glMatrixMode,
    glPopMatrix,
    glPushMatrix,
    glRotatef,
    glTranslatef,
    glVertex3f,
    glViewport,
)
from OpenGL.GLU import (
    gluLookAt,
    gluPerspective,
)
from PyQt6.QtCore import QPoint, QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QImage, QKeyEvent, QMouseEvent, QPainter, QPainterPath, QPen, QWheelEvent
from PyQt6.QtOpenGLWidgets import QOpenGLWidget

from ..config import GIZMOS, SOLVER
from ..math.camera_solver import solve_camera_pose
from ..math.capture import capture, viewfinder_rect
from ..math.gizmos import build_gizmos
from ..models.optical_parameters import OpticalParameters, ScreenRect
from ..models.prompt_state import CharacterPose

Color = Tuple[float, float, float]

LIGHT_DIRECTION = np.array([0.3, 0.9, 0.3], dtype=np.float64) / np.linalg.norm([0.3, 0.9, 0.3])

_BOX_FACES = (
    ((1.0, 0.0, 0.0), ((1, -1, -1), (1, 1, -1), (1, 1, 1), (1, -1, 1))),
    ((-1.0, 0.0, 0.0), ((-1, -1, 1), (-1, 1, 1), (-1, 1, -1), (-1, -1, -1))),
    ((0.0, 1.0, 0.0), ((-1, 1, -1), (-1, 1, 1), (1, 1, 1), (1, 1, -1))),
    ((0.0, -1.0, 0.0), ((-1, -1, 1), (-1, -1, -1), (1, -1, -1), (1, -1, 1))),
    ((0.0, 0.0, 1.0), ((-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1))),
    ((0.0, 0.0, -1.0), ((1, -1, -1), (-1, -1, -1), (-1, 1, -1), (1, 1, -1))),
)

# Leg swing (degrees about X at the hip) and torso drop per pose.
_POSE_RIG = {
    CharacterPose.STANDING: (0.0, 0.0),
    CharacterPose.WALKING: (20.0, 0.0),
    CharacterPose.RUNNING: (45.0, -0.1),
}


def _hex_to_rgb(value: str) -> Color:
    value = value.lstrip("#")
    return tuple(int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]


def _shade(color: Color, normal: Sequence[float]) -> Color:
    lambert = max(0.0, float(np.dot(normal, LIGHT_DIRECTION)))
    factor = 0.55 + 0.45 * lambert
    return color[0] * factor, color[1] * factor, color[2] * factor


class SceneWidget(QOpenGLWidget):
    """Renders the mannequin, ground grid and guides from the solved camera pose."""

    orbitRequested = pyqtSignal(float, float)  # delta azimuth, delta elevation (deg)
    dollyRequested = pyqtSignal(float)  # distance multiplier

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(480, 300)

        self._params = OpticalParameters()
        self._pose = CharacterPose.STANDING
        self._gizmos_visible = True
        self._viewfinder_visible = True
        self._grid_extent = 20
        self._sphere_segments = 24

        self._last_pos = QPointF()
        self._dragging = False
        self._drag_sensitivity = 0.4  # degrees per pixel
        self._keyboard_step = 5.0

    # ------------------------------------------------------------------
    def set_parameters(self, params: OpticalParameters) -> None:
        self._params = params
        self.update()

    def set_character_pose(self, pose: CharacterPose) -> None:
        self._pose = pose
        self.update()

    def set_gizmos_visible(self, visible: bool) -> None:
        self._gizmos_visible = bool(visible)
        self.update()

    def set_viewfinder_visible(self, visible: bool) -> None:
        self._viewfinder_visible = bool(visible)
        self.update()

    def viewfinder_screen_rect(self) -> ScreenRect:
        """Viewfinder rect in the coordinates of the top-level window."""
        local = viewfinder_rect(self.width(), self.height())
        origin = self.mapTo(self.window(), QPoint(0, 0))
        return ScreenRect(origin.x() + local.x, origin.y() + local.y, local.width, local.height)

    def surface_screen_rect(self) -> ScreenRect:
        origin = self.mapTo(self.window(), QPoint(0, 0))
        return ScreenRect(float(origin.x()), float(origin.y()), float(self.width()), float(self.height()))

    def capture_viewfinder(self) -> Optional[np.ndarray]:
        """Return the RGB pixels inside the viewfinder, or ``None`` if the surface is not ready."""
        if not self.isValid() or self.width() <= 0 or self.height() <= 0:
            logger.debug("Capture requested before the GL surface is ready")
            return None
        # grabFramebuffer renders a fresh frame before reading it back.
        frame = self.grabFramebuffer()
        if frame.isNull():
            return None
        buffer = _qimage_to_rgb(frame)
        return capture(self.viewfinder_screen_rect(), self.surface_screen_rect(), buffer)

    # ------------------------------------------------------------------
    def initializeGL(self) -> None:  # noqa: N802
        glClearColor(1.0, 1.0, 1.0, 1.0)
        glEnable(GL_DEPTH_TEST)
        glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)

    def resizeGL(self, width: int, height: int) -> None:  # noqa: N802
        ratio = self.devicePixelRatioF()
        glViewport(0, 0, int(width * ratio), int(height * ratio))

    def paintGL(self) -> None:  # noqa: N802
        pose = solve_camera_pose(self._params)

        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        aspect = max(1e-3, self.width() / max(1, self.height()))
        gluPerspective(pose.vertical_fov_deg, aspect, SOLVER.clip_near, SOLVER.clip_far)

        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()
        gluLookAt(*pose.position, *pose.look_target, *pose.up)

        self._draw_grid()
        self._draw_mannequin()
        if self._gizmos_visible:
            self._draw_gizmos()

    def paintEvent(self, event):  # noqa: N802
        super().paintEvent(event)
        if not self._viewfinder_visible:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        frame = viewfinder_rect(self.width(), self.height())
        rect = QRectF(frame.x, frame.y, frame.width, frame.height)

        mask = QPainterPath()
        mask.addRect(QRectF(self.rect()))
        hole = QPainterPath()
        hole.addRect(rect)
        painter.fillPath(mask.subtracted(hole), QColor(0, 0, 0, 178))

        pen = QPen(QColor(255, 255, 255, 242))
        pen.setWidth(2)
        painter.setPen(pen)
        arm = min(64.0, rect.width() / 6.0, rect.height() / 4.0)
        for corner, dx, dy in (
            (rect.topLeft(), 1, 1),
            (rect.topRight(), -1, 1),
            (rect.bottomLeft(), 1, -1),
            (rect.bottomRight(), -1, -1),
        ):
            painter.drawLine(corner, corner + QPointF(dx * arm, 0))
            painter.drawLine(corner, corner + QPointF(0, dy * arm))

        painter.setPen(QPen(QColor(255, 255, 255, 102), 1))
        center = rect.center()
        painter.drawLine(center - QPointF(24, 0), center + QPointF(24, 0))
        painter.drawLine(center - QPointF(0, 24), center + QPointF(0, 24))
        painter.end()

    # ------------------------------------------------------------------
    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            self._last_pos = event.position()
            self._dragging = True
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        pos = event.position()
        if self._dragging and event.buttons() & Qt.MouseButton.LeftButton:
            delta = pos - self._last_pos
            self.orbitRequested.emit(
                -float(delta.x()) * self._drag_sensitivity,
                float(delta.y()) * self._drag_sensitivity,
            )
        self._last_pos = pos
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            self._dragging = False
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:  # noqa: N802
        steps = event.angleDelta().y() / 120.0
        if steps != 0:
            self.dollyRequested.emit(math.pow(0.9, steps))
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
        key = event.key()
        step = self._keyboard_step
        moves = {
            Qt.Key.Key_Left: (-step, 0.0),
            Qt.Key.Key_A: (-step, 0.0),
            Qt.Key.Key_Right: (step, 0.0),
            Qt.Key.Key_D: (step, 0.0),
            Qt.Key.Key_Up: (0.0, step),
            Qt.Key.Key_W: (0.0, step),
            Qt.Key.Key_Down: (0.0, -step),
            Qt.Key.Key_S: (0.0, -step),
        }
        if key in moves:
            self.orbitRequested.emit(*moves[key])
            event.accept()
        else:
            super().keyPressEvent(event)

    # ------------------------------------------------------------------
    def _draw_grid(self) -> None:
        extent = self._grid_extent
        glLineWidth(1.0)
        glBegin(GL_LINES)
        for i in range(-extent, extent + 1):
            shade = 0.82 if i % 10 == 0 else 0.9
            glColor4f(shade, shade, shade, 1.0)
            glVertex3f(float(i), 0.0, float(-extent))
            glVertex3f(float(i), 0.0, float(extent))
            glVertex3f(float(-extent), 0.0, float(i))
            glVertex3f(float(extent), 0.0, float(i))
        glEnd()

    def _draw_mannequin(self) -> None:
        swing, torso_offset = _POSE_RIG[self._pose]
        leg = _hex_to_rgb("#222222")

        if swing == 0.0:
            self._draw_box((-0.12, 0.425, 0.0), (0.18, 0.85, 0.18), leg)
            self._draw_box((0.12, 0.425, 0.0), (0.18, 0.85, 0.18), leg)
        else:
            for hip_x, angle in ((-0.12, swing), (0.12, -swing)):
                glPushMatrix()
                glTranslatef(hip_x, 0.85, 0.0)
                glRotatef(angle, 1.0, 0.0, 0.0)
                self._draw_box((0.0, -0.425, 0.0), (0.18, 0.85, 0.18), leg)
                glPopMatrix()

        glPushMatrix()
        glTranslatef(0.0, torso_offset, 0.0)
        self._draw_box((0.0, 1.2, 0.0), (0.45, 0.7, 0.25), _hex_to_rgb("#444444"))
        arm = _hex_to_rgb("#333333")
        self._draw_box((-0.3, 1.15, 0.0), (0.12, 0.6, 0.12), arm)
        self._draw_box((0.3, 1.15, 0.0), (0.12, 0.6, 0.12), arm)

        skin = _hex_to_rgb("#fbc2ab")
        glPushMatrix()
        glTranslatef(0.0, SOLVER.eye_height_m, 0.0)
        self._draw_sphere(0.13, skin)
        # Eyes and nose face -Z, the subject's front.
        self._draw_box((-0.05, 0.03, -0.12), (0.03, 0.03, 0.03), (0.0, 0.0, 0.0))
        self._draw_box((0.05, 0.03, -0.12), (0.03, 0.03, 0.03), (0.0, 0.0, 0.0))
        self._draw_box((0.0, 0.0, -0.14), (0.015, 0.015, 0.06), skin)
        glPopMatrix()
        glPopMatrix()

    def _draw_gizmos(self) -> None:
        geometry = build_gizmos(self._params)
        glEnable(GL_BLEND)
        glDepthMask(False)
        glLineWidth(2.0)
        self._draw_polyline(geometry.azimuth_ring, _hex_to_rgb(GIZMOS.azimuth_color), 0.45, GL_LINE_LOOP)
        self._draw_polyline(geometry.elevation_arc, _hex_to_rgb(GIZMOS.elevation_color), 0.45, GL_LINE_STRIP)
        self._draw_polyline(geometry.sight_line, _hex_to_rgb(GIZMOS.distance_color), 0.9, GL_LINE_STRIP)
        glDepthMask(True)
        glDisable(GL_BLEND)

    @staticmethod
    def _draw_polyline(points: np.ndarray, color: Color, alpha: float, mode: int) -> None:
        glColor4f(color[0], color[1], color[2], alpha)
        glBegin(mode)
        for x, y, z in points:
            glVertex3f(float(x), float(y), float(z))
        glEnd()

    @staticmethod
    def _draw_box(center: Sequence[float], size: Sequence[float], color: Color) -> None:
        cx, cy, cz = center
        hx, hy, hz = size[0] / 2.0, size[1] / 2.0, size[2] / 2.0
        glBegin(GL_QUADS)
        for normal, corners in _BOX_FACES:
            r, g, b = _shade(color, normal)
            glColor4f(r, g, b, 1.0)
            for sx, sy, sz in corners:
                glVertex3f(cx + sx * hx, cy + sy * hy, cz + sz * hz)
        glEnd()

    def _draw_sphere(self, radius: float, color: Color) -> None:
        steps = self._sphere_segments
        for lat_idx in range(steps):
            phi0 = math.pi / 2.0 - math.pi * lat_idx / steps
            phi1 = math.pi / 2.0 - math.pi * (lat_idx + 1) / steps
            glBegin(GL_TRIANGLE_STRIP)
            for lon_idx in range(steps * 2 + 1):
                theta = math.pi * lon_idx / steps
                for phi in (phi1, phi0):
                    normal = (
                        math.cos(phi) * math.cos(theta),
                        math.sin(phi),
                        math.cos(phi) * math.sin(theta),
                    )
                    r, g, b = _shade(color, normal)
                    glColor4f(r, g, b, 1.0)
                    glVertex3f(radius * normal[0], radius * normal[1], radius * normal[2])
            glEnd()


def _qimage_to_rgb(image: QImage) -> np.ndarray:
    """Copy a ``QImage`` into an ``(H, W, 3)`` uint8 array."""
    converted = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = converted.width(), converted.height()
    ptr = converted.constBits()
    ptr.setsize(converted.sizeInBytes())
    rows = np.frombuffer(ptr, dtype=np.uint8).reshape(height, converted.bytesPerLine())
    rgba = rows[:, : width * 4].reshape(height, width, 4)
    return np.ascontiguousarray(rgba[..., :3])
