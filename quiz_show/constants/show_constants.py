"""Reveal sequencing constants shared across core and server layers."""

MAX_ANSWERS: int = 3
BLINK_INTERVAL_MS: int = 500
CUE_BOARD_CAPACITY: int = 64
SELF_WRITE_MEMORY: int = 32

DEFAULT_SHOW_FILE: str = "shows/demo_show.txt"
DEFAULT_MEDIA_DIR: str = "media"

REVEAL_SOUND_PATHS: tuple[str, ...] = (
    "/media/sounds/reveal1.mp3",
    "/media/sounds/reveal2.mp3",
    "/media/sounds/reveal3.mp3",
)
BLINK_LOOP_SOUND_PATH: str = "/media/sounds/answer_time.wav"
CORRECT_SOUND_PATH: str = "/media/sounds/answered.mp3"
