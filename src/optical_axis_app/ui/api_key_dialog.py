"""Dialog for entering the generation service API key."""
from __future__ import annotations

from PyQt6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
)


class ApiKeyDialog(QDialog):
    """Collects the Gemini API key; the key is stored locally on this machine."""

    def __init__(self, current_key: str = "", parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(420)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        hint = QLabel(
            "Enter a Google Gemini API key. It is stored in the local application settings "
            "and only sent to the generation service."
        )
        hint.setWordWrap(True)
        hint.setStyleSheet("color: #8aa; font-size: 11px;")
        layout.addWidget(hint)

        form = QFormLayout()
        form.setSpacing(6)
        self.key_field = QLineEdit(current_key)
        self.key_field.setEchoMode(QLineEdit.EchoMode.Password)
        self.key_field.setPlaceholderText("AIza...")
        form.addRow("API Key", self.key_field)

        self.show_checkbox = QCheckBox("Show key")
        self.show_checkbox.toggled.connect(self._on_show_toggled)
        form.addRow("", self.show_checkbox)
        layout.addLayout(form)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _on_show_toggled(self, checked: bool) -> None:
        mode = QLineEdit.EchoMode.Normal if checked else QLineEdit.EchoMode.Password
        self.key_field.setEchoMode(mode)

    def api_key(self) -> str:
        return self.key_field.text().strip()
