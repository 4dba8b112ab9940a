from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from datetime import datetime
from typing import Callable, Optional
import logging
import secrets

from errors import RelayError
from models import AddExpenseRequest, ErrorResponse
from payload_builder import ExpensePayloadBuilder
from settings import Settings, load_settings
from splitser_client import SplitserClient

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
PUBLIC_PATHS = ("/", "/openapi.yaml")
PUBLIC_PREFIXES = ("/.well-known/",)


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path == "/.well-known" or path.startswith(PUBLIC_PREFIXES)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app(settings: Optional[Settings] = None, *, clock: Callable[[], datetime] = datetime.now) -> FastAPI:
    """Build the relay app around an explicit, read-only Settings object"""
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="Splitser Expense Relay",
        description="Adds expenses to a Splitser list from simplified, natural-language input",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.builder = ExpensePayloadBuilder(settings.default_split_between)
    app.state.clock = clock

    if not settings.master_api_key:
        logger.warning("MASTER_API_KEY is not set; every protected request will be rejected")

    # ===== AUTH =====
    @app.middleware("http")
    async def require_api_key(request: Request, call_next):
        if is_public_path(request.url.path):
            return await call_next(request)
        key = request.headers.get(API_KEY_HEADER)
        expected = settings.master_api_key
        if not key or not expected or not secrets.compare_digest(key.encode(), expected.encode()):
            logger.warning(f"Rejected unauthenticated request to {request.url.path}")
            return error_response(401, "Unauthorized")
        return await call_next(request)

    # ===== ERROR MAPPING =====
    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        logger.error(f"Error adding expense: {exc}")
        return error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Invalid request body: {exc.errors()}")
        return error_response(400, "Invalid request body")

    # ===== PUBLIC ROUTES =====
    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root():
        return "ok"

    @app.get("/openapi.yaml", include_in_schema=False)
    async def openapi_yaml():
        path = settings.public_dir / "openapi.yaml"
        if not path.is_file():
            return error_response(404, "Not found")
        return FileResponse(path, media_type="application/yaml")

    well_known = settings.public_dir / ".well-known"
    if well_known.is_dir():
        app.mount("/.well-known", StaticFiles(directory=well_known), name="well-known")

    # ===== PROTECTED ROUTES =====
    @app.post("/addExpense")
    def add_expense(body: AddExpenseRequest, request: Request):
        """Build a Splitser expense from the simplified body and relay it"""
        state = request.app.state
        try:
            client = SplitserClient(
                settings.list_id,
                base_url=settings.remote_base_url,
                cookies=body.cookies,
            )
            payload = state.builder.build(body.to_expense(), now=state.clock())
            result = client.add_expense(payload)
        except RelayError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error adding expense: {e}")
            return error_response(400, str(e))
        return JSONResponse(content=result)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Splitser API listening on port {app.state.settings.port} (list {app.state.settings.list_id})")
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
