"""Network configuration constants for the quiz show."""

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000

# Empty base URL disables the lighting controller (logging-only actuator).
LIGHTING_CONTROLLER_BASE_URL: str = ""
LIGHTING_CONTROLLER_TIMEOUT_SECONDS: float = 2.0
