# app.py
import json
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from config import Settings, load_env
from schemas import AnalyzeResponse, ErrorResponse, HealthResponse
from services.gateway import AnalysisGateway, GatewayError

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(settings: Settings, gateway: Optional[AnalysisGateway] = None) -> FastAPI:
    gateway = gateway or AnalysisGateway(settings)
    app = FastAPI(title="Moments analysis API")
    app.state.settings = settings
    app.state.gateway = gateway

    too_large = f"Request body exceeds {settings.max_body_mb}MB"

    async def read_body(request: Request) -> bytes:
        # chunked uploads carry no Content-Length, so count while reading
        chunks, total = [], 0
        async for chunk in request.stream():
            total += len(chunk)
            if total > settings.max_body_bytes:
                logger.info("request.too_large path=%s bytes>%d", request.url.path, total)
                raise GatewayError(413, too_large)
            chunks.append(chunk)
        return b"".join(chunks)

    # --- Body ceiling ---------------------------------------------------------
    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > settings.max_body_bytes:
            logger.info("request.too_large path=%s bytes=%s", request.url.path, length)
            return JSONResponse(
                status_code=413,
                content={"error": too_large},
            )
        return await call_next(request)

    # outermost, so 413s still carry CORS headers
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    # --- Health ---------------------------------------------------------------
    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse()

    # --- Analyze endpoint -----------------------------------------------------
    @app.post(
        "/api/analyze",
        response_model=AnalyzeResponse,
        responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def analyze(request: Request):
        """
        Body: {"images": [data_url, ...]}. Returns {success, raw, data}.
        A body that is not a JSON object counts as having no images.
        """
        try:
            body: Any = json.loads(await read_body(request))
        except ValueError:
            body = {}
        images = body.get("images") if isinstance(body, dict) else None
        return await run_in_threadpool(gateway.analyze, images)

    return app


load_env()
settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)


# If run directly for local dev
if __name__ == "__main__":
    import uvicorn
    logger.info("Backend server listening on http://localhost:%d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
