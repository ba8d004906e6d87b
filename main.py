import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from gif_overlay import storage
from gif_overlay.config import Settings, configure_logging, load_settings
from gif_overlay.errors import ProcessingError
from gif_overlay.models import ErrorResponse, OverlayResponse, OverlaySpec
from gif_overlay.pipeline import process_gif

logger = logging.getLogger("gif_overlay.api")

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# --- Health ---
@router.get("/health")
async def health():
    return {"status": "ok"}


# --- Overlay Endpoint ---
@router.post(
    "/overlay",
    response_model=OverlayResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def overlay_endpoint(
    request: Request,
    gif: Optional[UploadFile] = File(None),
    text: Optional[str] = Form(None),
    fontSize: Optional[str] = Form(None),
    x: Optional[str] = Form(None),
    y: Optional[str] = Form(None),
    angle: Optional[str] = Form(None),
    color: Optional[str] = Form(None),
):
    """Draw rotated text onto every frame of an uploaded GIF.

    Validation failures are answered with 400 before anything is written to
    disk. Any failure after that point, whether decoding, rendering, encoding
    or writing the result, is logged and answered with a generic 500.
    """
    settings: Settings = request.app.state.settings
    if gif is None or not gif.filename:
        return _error(400, "No GIF file uploaded")
    if not text:
        return _error(400, "Text parameter is required")
    try:
        spec = OverlaySpec.from_form(text, fontSize, x, y, angle, color)
    except ValidationError as e:
        logger.info(f"Rejected overlay parameters: {e.errors()}")
        return _error(400, "Invalid overlay parameters")

    output_name = storage.new_output_name()
    input_path = None
    try:
        input_path = storage.save_upload(settings.upload_dir, gif.filename, await gif.read())
        logger.info(f"[{output_name}] Upload saved: {input_path}")
        output_bytes = await run_in_threadpool(
            process_gif,
            input_path,
            spec,
            quality=settings.quality,
            font_path=settings.font_path,
        )
        url_path = storage.save_bytes(settings.output_dir, output_name, output_bytes)
        storage.discard(input_path)
    except Exception as e:
        stage = e.label() if isinstance(e, ProcessingError) else "processing error"
        logger.exception(f"[{output_name}] Failed to process {input_path} ({stage}): {e}")
        if settings.cleanup_on_failure and input_path is not None:
            storage.discard(input_path)
        return _error(500, "Failed to process GIF")

    link = f"{settings.base_url}{url_path}"
    logger.info(f"[{output_name}] Done: {link}")
    return {"outputUrl": link}


# --- App Init ---
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application for ``settings`` (read from the environment by default)."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        os.makedirs(settings.upload_dir, exist_ok=True)
        os.makedirs(settings.output_dir, exist_ok=True)
        yield

    app = FastAPI(title="GIF Text Overlay", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # adjust in prod
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Output names are unique per request and never rewritten, so clients
    # may cache them for as long as they like.
    @app.middleware("http")
    async def add_cache_control_header(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith(storage.OUTPUT_URL_PREFIX + "/") and response.status_code == 200:
            response.headers["Cache-Control"] = "public, max-age=604800, immutable"
        return response

    app.include_router(router)
    app.mount(storage.OUTPUT_URL_PREFIX, StaticFiles(directory=settings.output_dir, check_dir=False), name="outputs")
    return app


app = create_app()


if __name__ == "__main__":
    settings = app.state.settings
    logger.info(f"Server running at {settings.base_url}")
    uvicorn.run(app, host=settings.host, port=settings.port)
