"""
Timeline Pro - FastAPI Backend
"""

import asyncio
from contextlib import asynccontextmanager
from urllib.parse import parse_qs

import httpx
import socketio
from socketio import exceptions as sio_exceptions
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timeline_pro.config import resolve_runtime_config, settings
from timeline_pro.database.db import init_db
from timeline_pro.logging import setup_logging, get_logger
from timeline_pro.routers import auth, library, workspace
from timeline_pro.services.gemini import GeminiService
from timeline_pro.services.generation import GenerationService
from timeline_pro.services.identity import IdentityService
from timeline_pro.services.library import LibraryService, LibrarySubscription
from timeline_pro.services.sheets import SheetImportService
from timeline_pro.services.workspace import WorkspaceService

logger = get_logger('main')


def create_app(http_transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """
    Build the API application.

    :param http_transport: Transport for outbound HTTP clients; None uses the network
    :type http_transport: httpx.AsyncBaseTransport | None
    :return: Configured FastAPI application with a Socket.IO server on ``app.state.sio``
    :rtype: FastAPI
    """
    # Socket.IO server for live library snapshots
    sio = socketio.AsyncServer(
        async_mode='asgi',
        cors_allowed_origins=settings.CORS_ORIGINS,
    )
    feeds: dict[str, tuple[LibrarySubscription, asyncio.Task]] = {}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        logger.info("Starting Timeline Pro API")

        runtime = resolve_runtime_config(settings)
        db_path = (runtime.database_credentials or {}).get("path") or settings.DATABASE_PATH
        if runtime.is_sandbox_mode:
            logger.info(f"Sandbox mode enabled (tenant {runtime.tenant_id})")

        await init_db(db_path)
        logger.info("Database initialized")

        # Initialize services
        gemini = GeminiService(
            api_key=runtime.ai_api_key,
            client=httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT_SECONDS,
                transport=http_transport,
            ),
        )
        sheets = SheetImportService(
            client=httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT_SECONDS,
                follow_redirects=True,
                transport=http_transport,
            ),
        )
        app.state.runtime = runtime
        app.state.identity_service = IdentityService(
            db_path=db_path,
            initial_auth_token=runtime.initial_auth_token,
        )
        app.state.library_service = LibraryService(
            db_path=db_path,
            tenant_id=runtime.tenant_id,
        )
        app.state.workspace_service = WorkspaceService(
            generation=GenerationService(gemini),
            sheets=sheets,
            library=app.state.library_service,
        )
        logger.info("Services initialized")

        yield

        logger.info("Shutting down application")
        relays = []
        for subscription, task in feeds.values():
            subscription.cancel()
            task.cancel()
            relays.append(task)
        feeds.clear()
        await asyncio.gather(*relays, return_exceptions=True)
        await gemini.aclose()
        await sheets.aclose()

    app = FastAPI(
        title="Timeline Pro API",
        description="Zoomable historical timelines from spreadsheets and AI research",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.sio = sio
    app.state.socket_feeds = feeds

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(workspace.router, prefix="/api/workspace", tags=["Workspace"])
    app.include_router(library.router, prefix="/api/library", tags=["Library"])

    async def relay_snapshots(sid: str, subscription: LibrarySubscription) -> None:
        async for snapshot in subscription:
            await sio.emit(
                "library_snapshot",
                [entry.model_dump(mode="json", by_alias=True) for entry in snapshot],
                to=sid,
            )

    @sio.event
    async def connect(sid, environ, auth=None):
        token = auth.get("token") if isinstance(auth, dict) else None
        if not token:
            token = parse_qs(environ.get('QUERY_STRING', '')).get('token', [''])[0]
        user = await app.state.identity_service.resolve(token)
        if user is None:
            raise sio_exceptions.ConnectionRefusedError("Sign in required")

        subscription = await app.state.library_service.subscribe(user.uid)
        feeds[sid] = (subscription, asyncio.create_task(relay_snapshots(sid, subscription)))
        logger.debug(f"Client {sid[:8]}... subscribed to library of {user.uid[:8]}...")

    @sio.event
    async def disconnect(sid):
        feed = feeds.pop(sid, None)
        if feed:
            subscription, _ = feed
            subscription.cancel()
        logger.debug(f"Client {sid[:8]}... disconnected")

    @app.get("/health")
    async def health_check():
        runtime = getattr(app.state, 'runtime', None)
        return {
            "status": "healthy",
            "service": "timeline-pro",
            "ai_available": bool(runtime and runtime.ai_api_key),
            "sandbox_mode": bool(runtime and runtime.is_sandbox_mode),
        }

    @app.get("/")
    async def root():
        return {
            "name": "Timeline Pro API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health"
        }

    return app


def create_asgi_app() -> socketio.ASGIApp:
    """ASGI entry point serving the API and Socket.IO on one port."""
    app = create_app()
    return socketio.ASGIApp(app.state.sio, other_asgi_app=app)
