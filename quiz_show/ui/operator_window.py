"""Qt main window for the show operator.

The presentation itself runs in an embedded browser view, so that view's
history is the navigation surface: Back/Forward/Reload here behave exactly
like the browser buttons on a separate presentation screen.
"""

from __future__ import annotations

from PySide6.QtCore import QTimer, QUrl
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_show.constants.ui_constants import (
    BUTTON_BACK,
    BUTTON_FORWARD,
    BUTTON_NEXT_STEP,
    BUTTON_OPEN_ROUND,
    BUTTON_RELOAD,
    BUTTON_ROUND_INTRO,
    BUTTON_ROUND_LIST,
    NO_ROUNDS_MESSAGE,
    STATUS_REFRESH_INTERVAL_MS,
    WINDOW_TITLE,
)
from quiz_show.core.models import NavigationLocation, Round
from quiz_show.core.services.navigation import (
    LocationDecodeError,
    decode_location,
    encode_location,
)
from quiz_show.styling.styles import Styles
from quiz_show.ui.dialog_helpers import confirm_leave_round, show_warning

_ADVANCE_SCRIPT = "window.quizShow && window.quizShow.advance();"
_LIGHTING_SCRIPT = "window.quizShow ? window.quizShow.lightingMode() : null;"


class OperatorMainWindow(QMainWindow):
    """Round picker and navigation controls around the presentation view."""

    def __init__(self, rounds: list[Round], base_url: str) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self._rounds = rounds
        self._base_url = base_url.rstrip("/")

        self._build_ui()
        self.setStyleSheet(Styles.get_main_window_style())
        self._configure_refresh_timer()
        self.view.setUrl(QUrl(f"{self._base_url}/quiz/start"))

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        root_layout.addLayout(self._build_round_row())
        root_layout.addLayout(self._build_navigation_row())

        self.view = QWebEngineView(self)
        self.view.urlChanged.connect(self._handle_url_changed)
        root_layout.addWidget(self.view, stretch=1)

        status_row = QHBoxLayout()
        self.status_label = QLabel("", self)
        self.status_label.setStyleSheet(Styles.get_status_label_style())
        status_row.addWidget(self.status_label, stretch=1)

        self.lighting_label = QLabel("", self)
        self.lighting_label.setStyleSheet(Styles.get_lighting_label_style(lit=False))
        status_row.addWidget(self.lighting_label)
        root_layout.addLayout(status_row)

    def _build_round_row(self) -> QHBoxLayout:
        row = QHBoxLayout()

        self.round_selector = QComboBox(self)
        for round_ in self._rounds:
            self.round_selector.addItem(round_.name, round_.id)
        row.addWidget(self.round_selector, stretch=1)

        self.open_round_button = QPushButton(BUTTON_OPEN_ROUND, self)
        self.open_round_button.clicked.connect(self._handle_open_round)
        row.addWidget(self.open_round_button)

        self.round_intro_button = QPushButton(BUTTON_ROUND_INTRO, self)
        self.round_intro_button.clicked.connect(self._handle_round_intro)
        row.addWidget(self.round_intro_button)

        self.round_list_button = QPushButton(BUTTON_ROUND_LIST, self)
        self.round_list_button.clicked.connect(
            lambda: self.view.setUrl(QUrl(f"{self._base_url}/quiz/start"))
        )
        row.addWidget(self.round_list_button)

        has_rounds = bool(self._rounds)
        self.open_round_button.setEnabled(has_rounds)
        self.round_intro_button.setEnabled(has_rounds)
        return row

    def _build_navigation_row(self) -> QHBoxLayout:
        row = QHBoxLayout()

        self.back_button = QPushButton(BUTTON_BACK, self)
        self.back_button.clicked.connect(lambda: self.view.back())
        row.addWidget(self.back_button)

        self.forward_button = QPushButton(BUTTON_FORWARD, self)
        self.forward_button.clicked.connect(lambda: self.view.forward())
        row.addWidget(self.forward_button)

        self.reload_button = QPushButton(BUTTON_RELOAD, self)
        self.reload_button.clicked.connect(lambda: self.view.reload())
        row.addWidget(self.reload_button)

        row.addStretch(1)

        self.next_step_button = QPushButton(BUTTON_NEXT_STEP, self)
        self.next_step_button.setObjectName("primary")
        self.next_step_button.clicked.connect(self._handle_next_step)
        row.addWidget(self.next_step_button)
        return row

    def showEvent(self, event) -> None:
        super().showEvent(event)
        if not self._rounds:
            show_warning(self, WINDOW_TITLE, NO_ROUNDS_MESSAGE)

    def _selected_round_id(self) -> str | None:
        return self.round_selector.currentData()

    def _presented_location(self) -> NavigationLocation | None:
        try:
            return decode_location(self.view.url().toString())
        except LocationDecodeError:
            return None

    def _handle_open_round(self) -> None:
        round_id = self._selected_round_id()
        if round_id is None:
            return
        presented = self._presented_location()
        if presented is not None and presented.round_id != round_id:
            name = next((r.name for r in self._rounds if r.id == presented.round_id), presented.round_id)
            if not confirm_leave_round(self, name):
                return
        url = encode_location(NavigationLocation(round_id=round_id))
        self.view.setUrl(QUrl(f"{self._base_url}{url}"))

    def _handle_round_intro(self) -> None:
        round_id = self._selected_round_id()
        if round_id is not None:
            self.view.setUrl(QUrl(f"{self._base_url}/quiz/{round_id}/start"))

    def _handle_next_step(self) -> None:
        self.view.page().runJavaScript(_ADVANCE_SCRIPT)

    def _handle_url_changed(self, url: QUrl) -> None:
        self.back_button.setEnabled(self.view.history().canGoBack())
        self.forward_button.setEnabled(self.view.history().canGoForward())
        location = self._presented_location()
        if location is None:
            self.status_label.setText(url.path())
            return
        self.status_label.setText(
            f"Round {location.round_id} · question {location.question_index + 1}"
            f" · step {location.step_index}"
        )

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(STATUS_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_lighting)
        self.refresh_timer.start()

    def _refresh_lighting(self) -> None:
        self.view.page().runJavaScript(_LIGHTING_SCRIPT, 0, self._update_lighting_label)

    def _update_lighting_label(self, mode: str | None) -> None:
        if not mode:
            self.lighting_label.setText("")
            return
        self.lighting_label.setText(f"Lights: {mode}")
        self.lighting_label.setStyleSheet(Styles.get_lighting_label_style(lit=mode != "OFF"))
