"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "QuizShow Operator Console"
STATUS_REFRESH_INTERVAL_MS: int = 500

BUTTON_OPEN_ROUND: str = "Open Round"
BUTTON_ROUND_INTRO: str = "Round Intro"
BUTTON_BACK: str = "Back"
BUTTON_FORWARD: str = "Forward"
BUTTON_RELOAD: str = "Reload"
BUTTON_NEXT_STEP: str = "Next Step"
BUTTON_ROUND_LIST: str = "All Rounds"

NO_ROUNDS_MESSAGE: str = "The show file does not contain any rounds."
SHOW_LOAD_FAILED_TITLE: str = "Show file error"
