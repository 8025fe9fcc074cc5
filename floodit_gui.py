"""PySide6 GUI for Flood-It (classic and maze modes)."""

from __future__ import annotations

import logging
import sys
from typing import Dict, List, Optional

from PySide6.QtCore import QSettings, Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from floodit_engine import (
    CLASSIC,
    DEFAULT_COLORS,
    DIFFICULTIES,
    MAZE,
    Board,
    CustomGameSettings,
    Difficulty,
    Position,
    is_custom_sentinel,
)
from floodit_persistence import BOARD_SIZE_RANGE, MOVE_LIMIT_RANGE
from floodit_session import FloodSession

logger = logging.getLogger(__name__)

SETTINGS_ORG = "floodit"
SETTINGS_APP = "floodit"
CELL_SIZE = 26
WALL_COLOR = "#241f31"
COLOR_HEX: Dict[str, str] = {color.name: color.hex for color in DEFAULT_COLORS}
PRESETS: List[Difficulty] = [d for d in DIFFICULTIES if not is_custom_sentinel(d)]


class QSettingsStorage:
    """Key/value storage on top of QSettings, for the session snapshot."""

    def __init__(self, settings: QSettings) -> None:
        self.settings = settings

    def get_item(self, key: str) -> Optional[str]:
        value = self.settings.value(f"state/{key}")
        if isinstance(value, str):
            return value
        return None

    def set_item(self, key: str, value: str) -> None:
        self.settings.setValue(f"state/{key}", value)
        self.settings.sync()


class ColorButton(QPushButton):
    def __init__(self, color_name: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(color_name.capitalize(), parent)
        self.color_name = color_name
        self.setObjectName("ColorButton")
        self.setProperty("selected", False)
        self.setCursor(Qt.PointingHandCursor)
        self.setMinimumSize(72, 40)
        self.setStyleSheet(f"background: {COLOR_HEX[color_name]};")

    def set_selected(self, selected: bool) -> None:
        if self.property("selected") == selected:
            return
        self.setProperty("selected", selected)
        self.style().unpolish(self)
        self.style().polish(self)


class BoardWidget(QFrame):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("Board")
        self.grid_layout = QGridLayout(self)
        self.grid_layout.setContentsMargins(10, 10, 10, 10)
        self.grid_layout.setSpacing(1)
        self.cells: List[List[QLabel]] = []
        self.shape = (0, 0)

    def _rebuild(self, rows: int, columns: int) -> None:
        for row_cells in self.cells:
            for cell in row_cells:
                self.grid_layout.removeWidget(cell)
                cell.deleteLater()
        self.cells = []
        for row in range(rows):
            row_cells = []
            for col in range(columns):
                cell = QLabel()
                cell.setFixedSize(CELL_SIZE, CELL_SIZE)
                cell.setAlignment(Qt.AlignCenter)
                self.grid_layout.addWidget(cell, row, col)
                row_cells.append(cell)
            self.cells.append(row_cells)
        self.shape = (rows, columns)

    def set_board(self, board: Optional[Board]) -> None:
        if board is None:
            self._rebuild(0, 0)
            return
        if self.shape != (board.rows, board.columns):
            self._rebuild(board.rows, board.columns)

        for row in range(board.rows):
            for col in range(board.columns):
                cell = self.cells[row][col]
                if board.walls is not None and board.walls[row][col]:
                    cell.setText("")
                    cell.setStyleSheet(f"background: {WALL_COLOR};")
                    continue
                color = COLOR_HEX.get(board.matrix[row][col], WALL_COLOR)
                cell.setText("G" if board.goal == Position(row, col) else "")
                cell.setStyleSheet(f"background: {color}; color: #ffffff; font-weight: 700;")


class FloodWindow(QMainWindow):
    def __init__(self, settings: Optional[QSettings] = None) -> None:
        super().__init__()
        self.setWindowTitle("Flood-It")
        self.setMinimumSize(760, 560)

        self.settings = settings if settings is not None else QSettings(SETTINGS_ORG, SETTINGS_APP)
        self.session = FloodSession(QSettingsStorage(self.settings))
        self.color_buttons: List[ColorButton] = []

        self._build_ui()
        self._apply_style()
        self._load_persistent_settings()

        if self.session.last_game_config is not None:
            self.session.start_new_round()
        self.refresh_ui()

    def _build_ui(self) -> None:
        root = QWidget(self)
        self.setCentralWidget(root)
        main_layout = QHBoxLayout(root)
        main_layout.setContentsMargins(18, 18, 18, 18)
        main_layout.setSpacing(16)

        board_layout = QVBoxLayout()
        board_layout.setSpacing(12)

        self.title_label = QLabel("Flood-It")
        self.title_label.setObjectName("Title")
        board_layout.addWidget(self.title_label)

        self.board_widget = BoardWidget()
        board_layout.addWidget(self.board_widget, 1, Qt.AlignCenter)

        keyboard = QHBoxLayout()
        keyboard.setSpacing(8)
        for color in DEFAULT_COLORS:
            button = ColorButton(color.name)
            button.clicked.connect(lambda _, b=button: self.handle_color_click(b))
            keyboard.addWidget(button)
            self.color_buttons.append(button)
        board_layout.addLayout(keyboard)

        self.status_label = QLabel("Pick a preset or a custom board to start.")
        self.status_label.setObjectName("Status")
        self.status_label.setWordWrap(True)
        board_layout.addWidget(self.status_label)

        side_widget = QFrame()
        side_widget.setObjectName("SidePanel")
        side_panel = QVBoxLayout(side_widget)
        side_panel.setContentsMargins(12, 12, 12, 12)
        side_panel.setSpacing(10)

        preset_header = QLabel("New Game")
        preset_header.setObjectName("SideHeader")
        side_panel.addWidget(preset_header)

        self.preset_combo = QComboBox()
        for difficulty in PRESETS:
            self.preset_combo.addItem(f"{difficulty.name} ({difficulty.rows}x{difficulty.columns})")
        side_panel.addWidget(self.preset_combo)

        self.start_preset_button = QPushButton("Start preset")
        self.start_preset_button.clicked.connect(self.start_selected_preset)
        side_panel.addWidget(self.start_preset_button)

        custom_header = QLabel("Custom")
        custom_header.setObjectName("SideHeader")
        side_panel.addWidget(custom_header)

        self.mode_combo = QComboBox()
        self.mode_combo.addItem("Classic", CLASSIC)
        self.mode_combo.addItem("Maze", MAZE)
        side_panel.addWidget(self.mode_combo)

        self.size_spin = QSpinBox()
        self.size_spin.setRange(*BOARD_SIZE_RANGE)
        self.size_spin.setPrefix("Size ")
        side_panel.addWidget(self.size_spin)

        self.limit_check = QCheckBox("Custom move limit")
        self.limit_check.toggled.connect(self._on_limit_toggled)
        side_panel.addWidget(self.limit_check)

        self.limit_spin = QSpinBox()
        self.limit_spin.setRange(*MOVE_LIMIT_RANGE)
        self.limit_spin.setPrefix("Moves ")
        side_panel.addWidget(self.limit_spin)

        self.start_custom_button = QPushButton("Start custom")
        self.start_custom_button.clicked.connect(self.start_custom_game)
        side_panel.addWidget(self.start_custom_button)

        round_header = QLabel("Round")
        round_header.setObjectName("SideHeader")
        side_panel.addWidget(round_header)

        self.reset_button = QPushButton("Reset board")
        self.reset_button.clicked.connect(self.reset_game)
        side_panel.addWidget(self.reset_button)

        self.new_round_button = QPushButton("New round")
        self.new_round_button.clicked.connect(self.new_round)
        side_panel.addWidget(self.new_round_button)

        self.quit_button = QPushButton("Quit round")
        self.quit_button.clicked.connect(self.quit_round)
        side_panel.addWidget(self.quit_button)

        side_panel.addStretch(1)

        main_layout.addLayout(board_layout, 2)
        main_layout.addWidget(side_widget, 1)

        self._set_custom_controls(self.session.custom_settings)

    def _apply_style(self) -> None:
        app = QApplication.instance()
        if app is not None:
            app.setStyle("Fusion")
            app.setFont(QFont("Cantarell", 11))

        self.setStyleSheet(
            """
            QMainWindow { background: #f6f5f4; }
            QLabel#Title { font-size: 22px; font-weight: 700; }
            QLabel#SideHeader { font-weight: 600; margin-top: 8px; }
            QLabel#Status { font-size: 13px; }
            QFrame#SidePanel {
                background: #ffffff;
                border: 1px solid #deddda;
                border-radius: 12px;
            }
            QFrame#Board { background: #deddda; border-radius: 8px; }
            QPushButton#ColorButton {
                color: #ffffff;
                font-weight: 700;
                border: 2px solid transparent;
                border-radius: 8px;
            }
            QPushButton#ColorButton[selected="true"] { border: 2px solid #000000; }
            QPushButton#ColorButton:disabled { color: rgba(255, 255, 255, 0.4); }
            """
        )

    def _set_custom_controls(self, settings: CustomGameSettings) -> None:
        idx = self.mode_combo.findData(settings.game_mode)
        self.mode_combo.setCurrentIndex(idx if idx >= 0 else 0)
        self.size_spin.setValue(settings.board_size)
        self.limit_check.setChecked(settings.custom_move_limit)
        self.limit_spin.setValue(settings.move_limit)
        self.limit_spin.setEnabled(settings.custom_move_limit)

    def _custom_settings_from_controls(self) -> CustomGameSettings:
        return CustomGameSettings(
            game_mode=self.mode_combo.currentData() or CLASSIC,
            board_size=self.size_spin.value(),
            custom_move_limit=self.limit_check.isChecked(),
            move_limit=self.limit_spin.value(),
        )

    def _on_limit_toggled(self, checked: bool) -> None:
        self.limit_spin.setEnabled(checked)

    def start_selected_preset(self) -> None:
        idx = self.preset_combo.currentIndex()
        if not 0 <= idx < len(PRESETS):
            return
        self.session.start_difficulty(PRESETS[idx])
        self.refresh_ui()

    def start_custom_game(self) -> None:
        self.session.start_custom(self._custom_settings_from_controls())
        self.refresh_ui()

    def handle_color_click(self, button: ColorButton) -> None:
        self.play_color(button.color_name)

    def play_color(self, color_name: str) -> None:
        if self.session.board is None or self.session.is_game_over:
            return
        result = self.session.play(color_name)
        if result is not None and result.game_state is None:
            logger.debug("ignored %s: flooded area already has that color", color_name)
        self.refresh_ui()

    def reset_game(self) -> None:
        if self.session.reset():
            self.refresh_ui()

    def new_round(self) -> None:
        if self.session.start_new_round():
            self.refresh_ui()

    def quit_round(self) -> None:
        self.session.quit()
        self.refresh_ui()

    def refresh_ui(self) -> None:
        self.board_widget.set_board(self.session.board)
        self.update_controls()
        self.update_status()

    def update_controls(self) -> None:
        board = self.session.board
        playable = board is not None and not self.session.is_game_over
        for button in self.color_buttons:
            button.setEnabled(playable)
            button.set_selected(button.color_name == self.session.selected_color)
        self.reset_button.setEnabled(board is not None)
        self.quit_button.setEnabled(board is not None)
        self.new_round_button.setEnabled(board is not None or self.session.last_game_config is not None)

    def update_status(self) -> None:
        board = self.session.board
        if board is None:
            self.title_label.setText("Flood-It")
            self.status_label.setText("Pick a preset or a custom board to start.")
            return

        mode_text = "Maze" if board.mode == MAZE else "Classic"
        self.title_label.setText(f"{board.name} | {mode_text}")
        if self.session.has_won:
            if board.mode == MAZE:
                text = f"You won! You reached the maze goal in {board.step} moves."
            else:
                text = f"You won! You flooded the board in {board.step} moves."
        elif self.session.is_game_over:
            if board.mode == MAZE:
                text = "Game over. You ran out of moves before reaching the maze goal."
            else:
                text = "Game over. You ran out of moves."
        else:
            text = f"Move {board.step} of {board.max_steps} | {self.session.steps_left} left"
        self.status_label.setText(text)

    def _load_persistent_settings(self) -> None:
        geometry = self.settings.value("window/geometry")
        if geometry is not None:
            self.restoreGeometry(geometry)

        preset = self.settings.value("view/preset")
        if isinstance(preset, str):
            for idx, difficulty in enumerate(PRESETS):
                if difficulty.name == preset:
                    self.preset_combo.setCurrentIndex(idx)
                    break

    def _save_persistent_settings(self) -> None:
        self.settings.setValue("window/geometry", self.saveGeometry())
        idx = self.preset_combo.currentIndex()
        if 0 <= idx < len(PRESETS):
            self.settings.setValue("view/preset", PRESETS[idx].name)
        self.settings.sync()

    def closeEvent(self, event) -> None:
        self._save_persistent_settings()
        self.session.update_custom_settings(self._custom_settings_from_controls())
        super().closeEvent(event)


def main() -> int:
    app = QApplication(sys.argv)
    window = FloodWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
