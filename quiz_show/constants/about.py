"""Static metadata describing QuizShow."""

APP_NAME = "QuizShow"
APP_VERSION = "0.1"
