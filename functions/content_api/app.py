"""
FastAPI application entry point for the long-running content server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from content_api.config import get_settings
from content_api.dependencies import get_content_router
from content_api.router import ApiRequest, ContentRouter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

router = APIRouter()


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
async def dispatch(
    path: str,
    request: Request,
    content_router: ContentRouter = Depends(get_content_router),
):
    api_request = ApiRequest(
        method=request.method,
        path=path,
        query=dict(request.query_params),
        headers=dict(request.headers),
        body=await request.body(),
    )
    response = await run_in_threadpool(content_router.dispatch, api_request)
    return JSONResponse(status_code=response.status_code, content=response.payload)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Starting content API (environment: %s)", settings.environment)
    logger.info("Admin user: %s", settings.admin_user)
    yield
    logger.info("Content API stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="School Content API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("content_api.app:app", host="0.0.0.0", port=8000)
