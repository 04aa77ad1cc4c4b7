"""FastAPI server hosting the presentation pages and the sequencer API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
import logging
from pathlib import Path
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
import uvicorn

from quiz_show.constants.about import APP_NAME, APP_VERSION
from quiz_show.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_show.core.models import LightingMode
from quiz_show.core.services.navigation import LocationDecodeError
from quiz_show.core.services.round_repository import RoundNotFoundError
from quiz_show.core.show_manager import ShowManager, media_url
from quiz_show.server.pages import (
    PRESENTATION_PAGE_HTML,
    render_round_intro_page,
    render_round_list_page,
)

logger = logging.getLogger(__name__)


class NavigationPayload(BaseModel):
    """Location change observed by the presentation page."""

    location: str
    token: int | None = None
    initial: bool = False


def _get_show_manager_dependency(show_manager: ShowManager):
    def dependency() -> ShowManager:
        return show_manager
    return dependency


def create_api_app(show_manager: ShowManager, media_dir: Path | None = None) -> FastAPI:
    """Create a FastAPI application wired to the provided show manager."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        logger.info("Presentation server stopping")
        await show_manager.shutdown()

    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION, lifespan=lifespan)
    manager_dep = _get_show_manager_dependency(show_manager)

    if media_dir is not None and media_dir.is_dir():
        app.mount("/media", StaticFiles(directory=media_dir), name="media")
    elif media_dir is not None:
        logger.warning("Media directory %s not found; sounds and images will be missing", media_dir)

    @app.get("/")
    def serve_root() -> RedirectResponse:
        return RedirectResponse(url="/quiz/start")

    @app.get("/quiz/start", response_class=HTMLResponse)
    async def serve_round_list(manager: ShowManager = Depends(manager_dep)) -> str:
        await manager.teardown()
        return render_round_list_page(manager.list_rounds())

    @app.get("/quiz/{round_id}/start", response_class=HTMLResponse)
    async def serve_round_intro(
        round_id: str,
        manager: ShowManager = Depends(manager_dep),
    ) -> str:
        try:
            round_ = await manager.get_round(round_id)
        except RoundNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return render_round_intro_page(
            round_,
            audio_url=media_url(round_.audio_path),
            background_url=media_url(round_.background_image_path),
        )

    @app.get("/quiz/{round_id}/play", response_class=HTMLResponse)
    def serve_presentation(round_id: str) -> str:
        return PRESENTATION_PAGE_HTML

    @app.get("/quiz/{round_id}/play/question/{question}/step/{step}", response_class=HTMLResponse)
    def serve_legacy_presentation(round_id: str, question: str, step: str) -> str:
        return PRESENTATION_PAGE_HTML

    @app.get("/api/rounds")
    def list_rounds(manager: ShowManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [
            {"id": round_.id, "name": round_.name, "order": round_.order}
            for round_ in manager.list_rounds()
        ]

    @app.post("/api/navigation", status_code=202)
    async def report_navigation(
        payload: NavigationPayload,
        manager: ShowManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            await manager.report_navigation(
                payload.location, payload.token, initial=payload.initial
            )
        except LocationDecodeError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return manager.snapshot()

    @app.post("/api/advance")
    async def advance(manager: ShowManager = Depends(manager_dep)) -> dict[str, object]:
        await manager.advance()
        return manager.snapshot()

    @app.get("/api/state")
    async def get_state(
        cue_since: int = 0,
        manager: ShowManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.snapshot(cue_since=cue_since)

    @app.post("/api/session/teardown", status_code=204)
    async def teardown_session(manager: ShowManager = Depends(manager_dep)) -> None:
        await manager.teardown()

    @app.put("/api/led-control/{mode}")
    async def set_lighting_mode(
        mode: str,
        manager: ShowManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            lighting_mode = LightingMode(mode.upper())
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=f"Unknown lighting mode '{mode}'") from exc
        accepted = await manager.set_lighting_mode(lighting_mode)
        return {"mode": lighting_mode.value, "accepted": accepted}

    return app


@dataclass(slots=True)
class ApiServerHandle:
    """Running server thread plus the means to stop it."""

    thread: Thread
    server: uvicorn.Server

    def stop(self, timeout: float = 5.0) -> None:
        self.server.should_exit = True
        self.thread.join(timeout=timeout)


def start_api_server(
    show_manager: ShowManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    media_dir: Path | None = None,
) -> ApiServerHandle:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(show_manager, media_dir=media_dir)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizShowServer", daemon=True)
    thread.start()
    return ApiServerHandle(thread=thread, server=server)
