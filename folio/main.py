import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from folio.config import get_settings
from folio.logging_config import configure_logging
from folio.routers.posts import limiter, router as posts_router
from folio.routers.reading_list import router as reading_list_router

configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Folio – portfolio and blog",
    description="Serves blog posts rendered from markdown, their page metadata, and the reading list.",
    version="1.0.0",
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(posts_router)
app.include_router(reading_list_router)

# Generated OG cards, published under the same path the page metadata points at
_settings = get_settings()
if _settings.og_dir.is_dir():
    app.mount(_settings.og_path, StaticFiles(directory=_settings.og_dir), name="og")


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Folio"}
