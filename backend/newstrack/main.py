"""NewsTrack - Journalist byline extraction service.

FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .routers import journalists
from .services.browser import BrowserPool


config.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the browser pool for the lifetime of the app.

    A pool already set on app.state (tests) is left alone. If Chromium can't
    start, the service keeps running with static fetching only.
    """
    owned = None
    if getattr(app.state, "browser_pool", None) is None:
        app.state.browser_pool = None
        if config.RENDERING_ENABLED:
            pool = BrowserPool()
            try:
                await pool.start()
            except Exception as e:
                logger.warning("Rendered browsing disabled, browser failed to start: %s", e)
            else:
                app.state.browser_pool = owned = pool
    try:
        yield
    finally:
        if owned is not None:
            await owned.shutdown()
            app.state.browser_pool = None


app = FastAPI(
    title="NewsTrack",
    description="Journalist byline extraction for news outlets",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(journalists.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
