"""Clients for the ambient lighting controller."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging

import httpx

from quiz_show.core.models import LightingMode

logger = logging.getLogger(__name__)

_MODE_PATHS: dict[LightingMode, str] = {
    LightingMode.OFF: "off",
    LightingMode.ONE: "1",
    LightingMode.TWO: "2",
    LightingMode.THREE: "3",
    LightingMode.BLINK: "blink",
    LightingMode.ALL: "all",
}


class DeviceActuator(ABC):
    """Performs lighting modes on hardware. Never raises for device errors."""

    @abstractmethod
    async def set_mode(self, mode: LightingMode) -> bool:
        """Request ``mode``; return True when the controller accepted it."""

    async def aclose(self) -> None:
        """Release any held resources."""


class HttpDeviceActuator(DeviceActuator):
    """Lighting controller reachable over HTTP (``PUT {base_url}/{mode}``)."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 2.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))

    @property
    def base_url(self) -> str:
        return self._base_url

    async def set_mode(self, mode: LightingMode) -> bool:
        target_url = f"{self._base_url}/{_MODE_PATHS[mode]}"
        try:
            response = await self._client.put(target_url)
        except httpx.HTTPError as exc:
            logger.warning("Lighting controller unreachable at %s: %s", target_url, exc)
            return False
        if not response.is_success:
            logger.warning(
                "Lighting controller rejected %s with status %d", mode.value, response.status_code
            )
            return False
        return True

    async def aclose(self) -> None:
        await self._client.aclose()


class LoggingDeviceActuator(DeviceActuator):
    """Stand-in used when no lighting controller is configured."""

    def __init__(self) -> None:
        self.last_mode: LightingMode | None = None

    async def set_mode(self, mode: LightingMode) -> bool:
        self.last_mode = mode
        logger.info("Lighting disabled; would set mode %s", mode.value)
        return True


def create_device_actuator(base_url: str, timeout_seconds: float) -> DeviceActuator:
    """Pick the HTTP client when a controller URL is configured."""
    if base_url:
        logger.info("Using lighting controller at %s", base_url)
        return HttpDeviceActuator(base_url, timeout_seconds=timeout_seconds)
    return LoggingDeviceActuator()
