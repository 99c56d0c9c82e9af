"""HTTP endpoint that proxies ScholarAI operations to the configured provider."""

from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import config
from .errors import InvalidRequestError, ScholarAIError
from .service import ScholarService

logger = config.get_logger(__name__)

ENDPOINT_PATHS = ("/api/gemini", "/api/generate")

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}


def get_service(request: Request) -> ScholarService:
    """Return the process-wide service, building it on first use.

    A missing credential is re-checked on every request until one is configured.
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        service = ScholarService.from_config()
        request.app.state.service = service
        logger.info("ScholarService initialized with provider %s", config.PROVIDER)
    return service


def generate(
    body: dict[str, Any] | None = Body(default=None),
    service: ScholarService = Depends(get_service),
) -> dict[str, Any]:
    """Run one operation: ``{"endpoint": ..., **fields}`` -> ``{"result": ...}``."""
    if not body:
        raise InvalidRequestError("Missing request body")

    endpoint = body.get("endpoint")
    fields = {key: value for key, value in body.items() if key != "endpoint"}
    logger.info("Handling '%s' request", endpoint)
    return {"result": service.dispatch(endpoint, fields)}


def preflight() -> Response:
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


def health() -> dict[str, str]:
    return {"status": "ok", "provider": config.PROVIDER}


async def handle_scholarai_error(_: Request, exc: ScholarAIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed (%s): %s", exc.status_code, exc.message)
    else:
        logger.warning("Request rejected (%s): %s", exc.status_code, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def handle_validation_error(_: Request, exc: Exception) -> JSONResponse:
    logger.warning("Malformed request body: %s", exc)
    return JSONResponse({"error": "Request body must be a JSON object"}, status_code=400)


async def handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers
    )


async def handle_unexpected_error(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("API Runtime Error", exc_info=exc)
    return JSONResponse(
        {"error": "An unexpected error occurred. Please try again."}, status_code=500
    )


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Returns:
        FastAPI: App with the generation endpoint, preflight and health routes.
    """
    app = FastAPI(title="ScholarAI API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for path in ENDPOINT_PATHS:
        app.add_api_route(path, generate, methods=["POST"])
        app.add_api_route(path, preflight, methods=["OPTIONS"])
    app.add_api_route("/api/health", health, methods=["GET"])

    app.add_exception_handler(ScholarAIError, handle_scholarai_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app


app = create_app()
