"""FastAPI application instance for the harness API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..logging_utils import configure_logging
from . import __version__
from .routes import router as api_router

configure_logging()

app = FastAPI(
    title="difftreecheck API",
    description="Compare dulwich tree diffs against git diff-tree",
    version=__version__,
)
app.include_router(api_router)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    """Uncaught exceptions become an INTERNAL_ERROR envelope."""
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": f"{type(exc).__name__}: {exc}",
                "details": {"path": request.url.path},
            },
        },
    )
