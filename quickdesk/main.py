from contextlib import asynccontextmanager
from typing import Optional

import aiofiles.os
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from quickdesk import __version__
from quickdesk.core.config import Settings, get_settings
from quickdesk.core.logging import setup_logging
from quickdesk.infrastructure.database import dispose_engine, init_db
from quickdesk.interfaces.http.routers import create_api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    await init_db()
    # StaticFiles refuses to serve from a missing directory.
    await aiofiles.os.makedirs(settings.uploads_root, exist_ok=True)
    yield
    await dispose_engine()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": f"{location}: {message}" if location else message},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.project_name,
        description="QuickDesk help desk ticketing API",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.mount(
        "/uploads",
        StaticFiles(directory=str(settings.uploads_root), check_dir=False),
        name="uploads",
    )

    app.include_router(create_api_router(), prefix=settings.api_prefix)

    @app.get("/health", tags=["service"])
    async def health():
        return {
            "success": True,
            "message": "QuickDesk API is running",
            "environment": settings.environment,
        }

    @app.get(settings.api_prefix, tags=["service"])
    async def api_index():
        prefix = settings.api_prefix
        return {
            "success": True,
            "message": "QuickDesk API",
            "data": {
                "version": __version__,
                "endpoints": {
                    "auth": f"{prefix}/auth",
                    "tickets": f"{prefix}/tickets",
                    "users": f"{prefix}/users",
                    "categories": f"{prefix}/categories",
                    "notifications": f"{prefix}/notifications",
                    "upload": f"{prefix}/upload",
                    "dashboard": f"{prefix}/dashboard",
                },
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "quickdesk.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.server.reload,
    )
