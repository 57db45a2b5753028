import asyncio
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI

from core.config import Settings, get_settings
from core.errors import AdminError, admin_error_handler
from core.limits import JSONBodyLimitMiddleware
from core.log import get_logger, log_loop_exception, setup_logging

logger = get_logger("app")


def create_app(settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        description="Relay between the MIQ study widget and OpenAI file search",
        version="1.0.0",
    )
    application.state.settings = settings
    # Built on first use when not injected; a missing key must not stop startup.
    application.state.openai_client = client

    application.add_middleware(JSONBodyLimitMiddleware, max_bytes=settings.max_json_body_mb * 1024 * 1024)
    # Added last so CORS headers also wrap the 413 from the body cap.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(AdminError, admin_error_handler)

    @application.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @application.on_event("startup")
    async def startup_event():
        asyncio.get_running_loop().set_exception_handler(log_loop_exception)
        if not settings.openai_api_key:
            logger.error("OPENAI_API_KEY is not set; provider calls will fail.")
        if not settings.admin_token:
            logger.warning("ADMIN_TOKEN is not set; admin endpoints are disabled.")

    # Routers are imported lazily to avoid circular deps during app creation
    from routers.health import router as health_router
    from routers.ask import router as ask_router
    from routers.admin import router as admin_router

    application.include_router(health_router, tags=["health"])
    application.include_router(ask_router, tags=["ask"])
    application.include_router(admin_router, prefix="/admin", tags=["admin"])

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().port)
