"""Main application window."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import numpy as np
from loguru import logger
from PyQt6.QtCore import QStandardPaths, Qt
from PyQt6.QtGui import QAction, QGuiApplication, QKeySequence
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QFileDialog,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QSlider,
    QSplitter,
    QStatusBar,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from ..config import GIZMOS
from ..io.export import ExportError, encode_png, save_capture
from ..math.classifier import ClassifiedTerms, LOCALIZED_LABELS
from ..models.optical_parameters import OpticalParameters, normalize_azimuth
from ..models.prompt_state import (
    MOTION_DESCRIPTIONS,
    MOTION_GROUPS,
    CameraMotion,
    CharacterPose,
    PromptMode,
    PromptState,
    group_available,
)
from ..services.text_generation import GeminiClient
from ..viewer.scene_widget import SceneWidget
from ..workers.task_runner import FunctionTask, TaskRunner
from .api_key_dialog import ApiKeyDialog
from .credential_store import CredentialStore
from .theme import parameter_label_style

ELEVATION_LIMIT = 90.0
MIN_DISTANCE = 0.5
MAX_DISTANCE = 40.0
SLIDER_STEPS_PER_UNIT = 10


class MainWindow(QMainWindow):
    """Viewport on the left, camera and prompt controls on the right."""

    def __init__(self, credentials: Optional[CredentialStore] = None) -> None:
        super().__init__()
        self.setWindowTitle("Optical Axis Studio")
        self.resize(1540, 920)

        self._state = PromptState()
        self._credentials = credentials or CredentialStore()
        self._task_runner = TaskRunner()
        self._export_dir = Path(
            QStandardPaths.writableLocation(QStandardPaths.StandardLocation.PicturesLocation) or Path.home()
        )
        self._syncing_fields = False
        self._motion_boxes: Dict[CameraMotion, QCheckBox] = {}
        self._motion_sections: Dict[str, QWidget] = {}
        self._final_prompt = ""

        self.viewer = SceneWidget()

        self._build_ui()
        self._create_menu_bar()
        self._connect_signals()
        self._apply_parameters(self._state.parameters)
        self._update_motion_sections(self._state.mode)
        logger.info("UI initialised")

    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        splitter = QSplitter(Qt.Orientation.Horizontal, self)
        splitter.setChildrenCollapsible(False)
        splitter.setHandleWidth(8)
        splitter.addWidget(self.viewer)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._build_sidebar())
        splitter.addWidget(scroll)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 2)
        self.setCentralWidget(splitter)

        self.setStatusBar(QStatusBar())

    def _build_sidebar(self) -> QWidget:
        sidebar = QWidget()
        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(12)
        layout.addWidget(self._build_camera_group())
        layout.addWidget(self._build_terms_group())
        layout.addWidget(self._build_story_group())
        layout.addWidget(self._build_motion_group())
        layout.addWidget(self._build_generation_group(), stretch=1)
        layout.addStretch(1)
        return sidebar

    # Camera -----------------------------------------------------------------
    def _build_camera_group(self) -> QGroupBox:
        group = QGroupBox("Optical Axis")
        grid = QGridLayout(group)
        grid.setVerticalSpacing(6)

        self.azimuth_field = self._make_spin(0.0, 359.9, " deg")
        self.azimuth_field.setWrapping(True)
        self.azimuth_slider = self._make_slider(0.0, 359.9)

        self.elevation_field = self._make_spin(-ELEVATION_LIMIT, ELEVATION_LIMIT, " deg")
        self.elevation_slider = self._make_slider(-ELEVATION_LIMIT, ELEVATION_LIMIT)

        self.distance_field = self._make_spin(MIN_DISTANCE, MAX_DISTANCE, " m")
        self.distance_slider = self._make_slider(MIN_DISTANCE, MAX_DISTANCE)

        rows = (
            ("AZIMUTH", GIZMOS.azimuth_color, self.azimuth_slider, self.azimuth_field),
            ("ELEVATION", GIZMOS.elevation_color, self.elevation_slider, self.elevation_field),
            ("DISTANCE", GIZMOS.distance_color, self.distance_slider, self.distance_field),
        )
        for row, (caption, color, slider, field) in enumerate(rows):
            label = QLabel(caption)
            label.setStyleSheet(parameter_label_style(color))
            grid.addWidget(label, row, 0)
            grid.addWidget(slider, row, 1)
            grid.addWidget(field, row, 2)

        self.pose_combo = QComboBox()
        for pose in CharacterPose:
            self.pose_combo.addItem(pose.value, pose)
            self.pose_combo.setItemData(
                self.pose_combo.count() - 1, MOTION_DESCRIPTIONS[pose], Qt.ItemDataRole.ToolTipRole
            )
        self.include_pose_checkbox = QCheckBox("Mention pose in prompt")
        grid.addWidget(QLabel("Pose"), 3, 0)
        grid.addWidget(self.pose_combo, 3, 1)
        grid.addWidget(self.include_pose_checkbox, 3, 2)

        button_row = QHBoxLayout()
        self.reset_button = QPushButton("Reset Camera")
        self.capture_button = QPushButton("Capture Viewfinder")
        self.capture_button.setToolTip("Save the framed area of the preview as a PNG.")
        button_row.addWidget(self.reset_button)
        button_row.addStretch(1)
        button_row.addWidget(self.capture_button)
        grid.addLayout(button_row, 4, 0, 1, 3)
        return group

    @staticmethod
    def _make_spin(minimum: float, maximum: float, suffix: str) -> QDoubleSpinBox:
        field = QDoubleSpinBox()
        field.setRange(minimum, maximum)
        field.setDecimals(1)
        field.setSingleStep(1.0)
        field.setSuffix(suffix)
        field.setKeyboardTracking(False)
        return field

    @staticmethod
    def _make_slider(minimum: float, maximum: float) -> QSlider:
        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setRange(int(round(minimum * SLIDER_STEPS_PER_UNIT)), int(round(maximum * SLIDER_STEPS_PER_UNIT)))
        return slider

    # Terms ------------------------------------------------------------------
    def _build_terms_group(self) -> QGroupBox:
        group = QGroupBox("Shot Classification")
        form = QFormLayout(group)
        form.setVerticalSpacing(4)
        self.direction_label = QLabel("-")
        self.angle_label = QLabel("-")
        self.size_label = QLabel("-")
        for label in (self.direction_label, self.angle_label, self.size_label):
            label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
            label.setStyleSheet("font-weight: 600;")
        form.addRow("Direction", self.direction_label)
        form.addRow("Angle", self.angle_label)
        form.addRow("Size", self.size_label)
        return group

    # Story ------------------------------------------------------------------
    def _build_story_group(self) -> QGroupBox:
        group = QGroupBox("Story")
        form = QFormLayout(group)
        form.setVerticalSpacing(6)

        self.description_field = QPlainTextEdit()
        self.description_field.setPlaceholderText("What happens in this shot?")
        self.description_field.setFixedHeight(80)
        self.style_field = QLineEdit()
        self.style_field.setPlaceholderText("e.g. Film noir, Wes Anderson")
        self.mode_combo = QComboBox()
        self.mode_combo.addItem("Image prompt", PromptMode.IMAGE)
        self.mode_combo.addItem("Video prompt", PromptMode.VIDEO)

        form.addRow("Description", self.description_field)
        form.addRow("Style", self.style_field)
        form.addRow("Target", self.mode_combo)
        return group

    def _build_motion_group(self) -> QGroupBox:
        group = QGroupBox("Camera Motion")
        vbox = QVBoxLayout(group)
        vbox.setSpacing(6)
        for name, motions in MOTION_GROUPS:
            section = QWidget()
            section_layout = QVBoxLayout(section)
            section_layout.setContentsMargins(0, 0, 0, 0)
            section_layout.setSpacing(4)
            caption = QLabel(name.upper())
            caption.setStyleSheet("color: #8aa; font-size: 10px; letter-spacing: 2px;")
            section_layout.addWidget(caption)
            grid = QGridLayout()
            grid.setHorizontalSpacing(8)
            for index, motion in enumerate(motions):
                box = QCheckBox(motion.value)
                box.setToolTip(MOTION_DESCRIPTIONS.get(motion, ""))
                box.toggled.connect(lambda checked, m=motion: self._on_motion_toggled(m, checked))
                self._motion_boxes[motion] = box
                grid.addWidget(box, index // 3, index % 3)
            section_layout.addLayout(grid)
            self._motion_sections[name] = section
            vbox.addWidget(section)
        return group

    def _update_motion_sections(self, mode: PromptMode) -> None:
        # Selections in hidden groups are kept and reappear when switching back.
        for name, section in self._motion_sections.items():
            section.setVisible(group_available(name, mode))

    # Generation -------------------------------------------------------------
    def _build_generation_group(self) -> QGroupBox:
        group = QGroupBox("Brief and Prompt")
        vbox = QVBoxLayout(group)
        vbox.setSpacing(6)

        self.attach_capture_checkbox = QCheckBox("Attach viewfinder capture to brief request")
        self.attach_capture_checkbox.setChecked(True)
        vbox.addWidget(self.attach_capture_checkbox)

        self.brief_button = QPushButton("1. Generate Cinematography Brief")
        vbox.addWidget(self.brief_button)

        self.brief_editor = QPlainTextEdit()
        self.brief_editor.setPlaceholderText("The brief appears here and can be edited before compiling.")
        self.brief_editor.setMinimumHeight(160)
        vbox.addWidget(self.brief_editor)

        self.compile_button = QPushButton("2. Compile Final Prompt")
        vbox.addWidget(self.compile_button)

        self.prompt_view = QTextBrowser()
        self.prompt_view.setOpenExternalLinks(True)
        self.prompt_view.setMinimumHeight(160)
        vbox.addWidget(self.prompt_view)

        copy_row = QHBoxLayout()
        copy_row.addStretch(1)
        self.copy_button = QPushButton("Copy Prompt")
        self.copy_button.setEnabled(False)
        copy_row.addWidget(self.copy_button)
        vbox.addLayout(copy_row)
        return group

    # Menu -------------------------------------------------------------------
    def _create_menu_bar(self) -> None:
        bar = self.menuBar()
        file_menu = bar.addMenu("File")

        capture_action = QAction("Capture Viewfinder", self)
        capture_action.setShortcut(QKeySequence("Ctrl+P"))
        capture_action.triggered.connect(self._on_capture_clicked)
        file_menu.addAction(capture_action)

        folder_action = QAction("Set Capture Folder...", self)
        folder_action.triggered.connect(self._on_choose_export_dir)
        file_menu.addAction(folder_action)

        file_menu.addSeparator()
        settings_action = QAction("Settings...", self)
        settings_action.triggered.connect(self._on_settings_clicked)
        file_menu.addAction(settings_action)

        file_menu.addSeparator()
        exit_action = QAction("Quit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        view_menu = bar.addMenu("View")
        guides_action = QAction("Show Guides", self)
        guides_action.setCheckable(True)
        guides_action.setChecked(True)
        guides_action.toggled.connect(self.viewer.set_gizmos_visible)
        view_menu.addAction(guides_action)

        viewfinder_action = QAction("Show Viewfinder", self)
        viewfinder_action.setCheckable(True)
        viewfinder_action.setChecked(True)
        viewfinder_action.toggled.connect(self.viewer.set_viewfinder_visible)
        view_menu.addAction(viewfinder_action)

    def _connect_signals(self) -> None:
        for name, field, slider in (
            ("azimuth", self.azimuth_field, self.azimuth_slider),
            ("elevation", self.elevation_field, self.elevation_slider),
            ("distance", self.distance_field, self.distance_slider),
        ):
            field.valueChanged.connect(lambda value, n=name: self._on_control_changed(n, value))
            slider.valueChanged.connect(
                lambda value, n=name: self._on_control_changed(n, value / SLIDER_STEPS_PER_UNIT)
            )

        self.viewer.orbitRequested.connect(self._on_orbit_requested)
        self.viewer.dollyRequested.connect(self._on_dolly_requested)

        self.pose_combo.currentIndexChanged.connect(self._on_pose_changed)
        self.include_pose_checkbox.toggled.connect(self._on_include_pose_toggled)
        self.description_field.textChanged.connect(self._on_story_changed)
        self.style_field.textChanged.connect(self._on_story_changed)
        self.mode_combo.currentIndexChanged.connect(self._on_story_changed)

        self.reset_button.clicked.connect(self._on_reset_clicked)
        self.capture_button.clicked.connect(self._on_capture_clicked)
        self.brief_button.clicked.connect(self._on_generate_brief_clicked)
        self.compile_button.clicked.connect(self._on_compile_clicked)
        self.copy_button.clicked.connect(self._on_copy_clicked)

    # ------------------------------------------------------------------
    # Optical parameters
    def _apply_parameters(self, params: OpticalParameters) -> None:
        """Store a new snapshot and push it to every derived view."""
        params = params.with_changes(
            azimuth=normalize_azimuth(params.azimuth),
            elevation=float(np.clip(params.elevation, -ELEVATION_LIMIT, ELEVATION_LIMIT)),
            distance=float(np.clip(params.distance, MIN_DISTANCE, MAX_DISTANCE)),
        )
        self._state.parameters = params
        self._set_parameter_fields(params)
        self.viewer.set_parameters(params)
        self._update_terms(self._state.terms)

    def _set_parameter_fields(self, params: OpticalParameters) -> None:
        """Update spin boxes and sliders without re-entering the change handlers."""
        self._syncing_fields = True
        try:
            self.azimuth_field.setValue(params.azimuth)
            self.elevation_field.setValue(params.elevation)
            self.distance_field.setValue(params.distance)
            self.azimuth_slider.setValue(int(round(params.azimuth * SLIDER_STEPS_PER_UNIT)))
            self.elevation_slider.setValue(int(round(params.elevation * SLIDER_STEPS_PER_UNIT)))
            self.distance_slider.setValue(int(round(params.distance * SLIDER_STEPS_PER_UNIT)))
        finally:
            self._syncing_fields = False

    def _on_control_changed(self, name: str, value: float) -> None:
        """Replace only the edited parameter; the others keep full precision."""
        if self._syncing_fields:
            return
        self._apply_parameters(self._state.parameters.with_changes(**{name: value}))

    def _on_orbit_requested(self, delta_azimuth: float, delta_elevation: float) -> None:
        params = self._state.parameters
        self._apply_parameters(
            params.with_changes(
                azimuth=params.azimuth + delta_azimuth,
                elevation=params.elevation + delta_elevation,
            )
        )

    def _on_dolly_requested(self, factor: float) -> None:
        params = self._state.parameters
        self._apply_parameters(params.with_changes(distance=params.distance * factor))

    def _on_reset_clicked(self) -> None:
        self._apply_parameters(OpticalParameters())
        self.statusBar().showMessage("Camera reset to front / eye level", 2500)

    def _update_terms(self, terms: ClassifiedTerms) -> None:
        self.direction_label.setText(f"{terms.direction.value}  {LOCALIZED_LABELS[terms.direction]}")
        self.angle_label.setText(f"{terms.angle.value}  {LOCALIZED_LABELS[terms.angle]}")
        self.size_label.setText(f"{terms.size.title} ({terms.size.abbreviation})  {LOCALIZED_LABELS[terms.size]}")
        logger.debug("Terms for {}: {}", self._state.parameters, terms)

    # ------------------------------------------------------------------
    # Story state
    def _on_pose_changed(self, index: int) -> None:
        pose = self.pose_combo.itemData(index)
        if pose is None:
            return
        self._state.pose = pose
        self.viewer.set_character_pose(pose)

    def _on_include_pose_toggled(self, checked: bool) -> None:
        self._state.include_pose = checked

    def _on_story_changed(self) -> None:
        self._state.description = self.description_field.toPlainText()
        self._state.style = self.style_field.text()
        self._state.mode = self.mode_combo.currentData() or PromptMode.IMAGE
        self._update_motion_sections(self._state.mode)

    def _on_motion_toggled(self, motion: CameraMotion, checked: bool) -> None:
        if (motion in self._state.motions) != checked:
            self._state.toggle_motion(motion)

    # ------------------------------------------------------------------
    # Capture
    def _on_capture_clicked(self) -> None:
        image = self.viewer.capture_viewfinder()
        if image is None:
            self.statusBar().showMessage("Preview not ready; nothing captured", 3000)
            return
        try:
            path = save_capture(image, self._export_dir)
        except ExportError as exc:
            QMessageBox.warning(self, "Capture Failed", str(exc))
            return
        self.statusBar().showMessage(f"Saved capture to {path}", 4000)

    def _on_choose_export_dir(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Select Capture Folder", str(self._export_dir))
        if folder:
            self._export_dir = Path(folder)
            self.statusBar().showMessage(f"Captures will be saved to {folder}", 3000)

    # ------------------------------------------------------------------
    # Text generation
    def _client(self) -> GeminiClient:
        return GeminiClient(api_key=self._credentials.api_key())

    def _on_generate_brief_clicked(self) -> None:
        client = self._client()
        if not client.has_api_key:
            QMessageBox.information(self, "API Key Missing", "Enter a Gemini API key in Settings first.")
            self._on_settings_clicked()
            return

        image_png: Optional[bytes] = None
        if self.attach_capture_checkbox.isChecked():
            image = self.viewer.capture_viewfinder()
            if image is not None:
                try:
                    image_png = encode_png(image)
                except ExportError as exc:
                    logger.warning("Viewfinder capture not attached: {}", exc)

        self.brief_editor.clear()
        self.prompt_view.clear()
        self.copy_button.setEnabled(False)
        self._set_generation_busy(True, "Generating cinematography brief...")
        task = FunctionTask("brief", client.generate_brief, self._snapshot_state(), image_png)
        self._task_runner.submit(task, self._brief_ready, self._generation_failed)

    def _on_compile_clicked(self) -> None:
        brief = self.brief_editor.toPlainText()
        if not brief.strip():
            QMessageBox.information(self, "No Brief", "Generate or write a brief before compiling.")
            return
        client = self._client()
        if not client.has_api_key:
            QMessageBox.information(self, "API Key Missing", "Enter a Gemini API key in Settings first.")
            return
        self._set_generation_busy(True, "Compiling final prompt...")
        task = FunctionTask("final prompt", client.compile_final_prompt, brief, self._state.mode)
        self._task_runner.submit(task, self._prompt_ready, self._generation_failed)

    def _snapshot_state(self) -> PromptState:
        state = self._state
        return PromptState(
            parameters=state.parameters,
            description=state.description,
            style=state.style,
            motions=list(state.motions),
            mode=state.mode,
            pose=state.pose,
            include_pose=state.include_pose,
        )

    def _brief_ready(self, text: str) -> None:
        self._set_generation_busy(False)
        self.brief_editor.setPlainText(text)
        self.statusBar().showMessage("Brief ready; edit it if needed, then compile", 4000)

    def _prompt_ready(self, text: str) -> None:
        self._set_generation_busy(False)
        self.prompt_view.setMarkdown(text)
        self._final_prompt = text
        self.copy_button.setEnabled(True)
        self.statusBar().showMessage("Final prompt ready", 4000)

    def _generation_failed(self, message: str) -> None:
        self._set_generation_busy(False)
        QMessageBox.critical(self, "Generation Failed", message)

    def _set_generation_busy(self, busy: bool, message: str = "") -> None:
        self.brief_button.setEnabled(not busy)
        self.compile_button.setEnabled(not busy)
        if busy:
            self.statusBar().showMessage(message)
        else:
            self.statusBar().clearMessage()

    def _on_copy_clicked(self) -> None:
        text = self._final_prompt
        if not text:
            return
        QGuiApplication.clipboard().setText(text)
        self.statusBar().showMessage("Prompt copied to clipboard", 2000)

    def _on_settings_clicked(self) -> None:
        dialog = ApiKeyDialog(self._credentials.api_key(), parent=self)
        if dialog.exec():
            self._credentials.set_api_key(dialog.api_key())
            self.statusBar().showMessage("Settings saved", 2000)
