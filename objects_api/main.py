import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse


# Load environment variables from .env file
PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE = PROJECT_ROOT / ".env"
load_dotenv(ENV_FILE)

from objects_api.config import settings
from objects_api.enums import ErrorCode
from objects_api.routers.api_v1.api import api_router
from objects_api.schemas.mint import ErrorResponse
from objects_api.services.errors import MintServiceError
from objects_api.services.metrics import get_metrics


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Fails fast when the ledger or registry settings are missing, then connects
    MongoDB (creating the unique token_uri index) and the contract client.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Startup
    print("\n" + "=" * 60)
    print(f"🚀 Starting {settings.api_title} v{settings.api_version}")
    print("=" * 60)
    print(f"Environment: {settings.environment}")

    missing = settings.missing_required()
    if missing:
        print(f"❌ Missing required environment variables: {', '.join(missing)}")
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    from objects_api.database.connection import get_db_manager
    from objects_api.dependencies.ledger import get_ledger

    try:
        db_manager = get_db_manager()
        await db_manager.initialize()
        print(f"✅ Connected to MongoDB (database: {settings.mongo_database})")
    except Exception as e:
        print(f"❌ MongoDB initialization failed: {str(e)}")
        raise

    ledger = get_ledger()
    print(f"✅ Contract client ready: {ledger.address}")
    print(f"   Signer: {ledger.chain_context.signer_address}")

    print(f"\n📚 API Documentation: http://127.0.0.1:{settings.api_port}/docs")
    print("=" * 60 + "\n")

    yield  # Application runs here

    # Shutdown
    print("\n" + "=" * 60)
    print("🛑 Shutting down API")
    print("=" * 60)

    try:
        await db_manager.close()
        print("✅ MongoDB connections closed")
    except Exception as e:
        print(f"⚠️  Error closing MongoDB: {str(e)}")

    print("=" * 60 + "\n")


app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    contact=settings.contact,
    lifespan=lifespan,
)
app.state.metrics = get_metrics()


# ============================================================================
# Middleware
# ============================================================================


UNMATCHED_ROUTE = "<unmatched>"


def _action_name(request: Request) -> str:
    # Route template, not the concrete path, so token ids share one bucket
    route = request.scope.get("route")
    path = getattr(route, "path", None) or UNMATCHED_ROUTE
    return f"{request.method} {path}"


@app.middleware("http")
async def track_request_metrics(request: Request, call_next):
    """Report duration and outcome of every request to the metrics collector"""
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # Rendered by the INTERNAL_ERROR handler outside this middleware
        duration_ms = (time.perf_counter() - start) * 1000
        action = _action_name(request)
        request.app.state.metrics.record_request(action, duration_ms, False)
        logger.info(f"[FAILED] Action: {action} unhandled error ({duration_ms:.1f} ms)")
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    success = response.status_code < 400
    action = _action_name(request)

    request.app.state.metrics.record_request(action, duration_ms, success)
    if success:
        logger.info(f"[SUCCESS] Action: {action} ({duration_ms:.1f} ms)")
    else:
        logger.info(f"[FAILED] Action: {action} status={response.status_code} ({duration_ms:.1f} ms)")
    return response


# ============================================================================
# Error Handlers
# ============================================================================


def _error_response(status_code: int, error: str, error_code: ErrorCode, details: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, error_code=error_code.value, details=details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(MintServiceError)
async def mint_service_error_handler(request: Request, exc: MintServiceError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message, exc.error_code, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        400, "Invalid request", ErrorCode.INVALID_REQUEST, {"errors": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(500, "Internal server error", ErrorCode.INTERNAL_ERROR, {"message": str(exc)})


# ============================================================================
# Root Endpoints
# ============================================================================

root_router = APIRouter()


@root_router.get("/")
async def root():
    """Basic HTML response."""
    body = (
        "<html>"
        "<body style='padding: 10px;'>"
        "<h1>Welcome to the Metaverse Objects API</h1>"
        "<div>"
        "Check the docs: <a href='/docs'>here</a>"
        "</div>"
        "</body>"
        "</html>"
    )

    return HTMLResponse(content=body)


@root_router.get("/health")
async def health_check():
    """
    Health check endpoint that tests MongoDB and RPC connectivity.

    Returns:
        - status: "healthy" if both MongoDB and the RPC node are reachable
        - database: MongoDB connection status
        - ledger: RPC connection status
        - api_version: API version
        - environment: Current environment
    """
    from objects_api.database.connection import get_db_manager
    from objects_api.dependencies.ledger import get_ledger

    health_status = {
        "status": "healthy",
        "api_version": settings.api_version,
        "environment": settings.environment,
        "database": {"type": "MongoDB", "connected": False},
        "ledger": {"connected": False},
    }

    try:
        health_status["database"]["connected"] = await get_db_manager().ping()
    except Exception as e:
        health_status["database"]["error"] = str(e)

    try:
        ledger = get_ledger()
        health_status["ledger"]["connected"] = await ledger.chain_context.is_connected()
        health_status["ledger"]["contract_address"] = ledger.address
    except Exception as e:
        health_status["ledger"]["error"] = str(e)

    if not (health_status["database"]["connected"] and health_status["ledger"]["connected"]):
        health_status["status"] = "unhealthy"
        return JSONResponse(content=health_status, status_code=503)

    return JSONResponse(content=health_status, status_code=200)


app.include_router(root_router)
app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "objects_api.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        reload=settings.is_development,
    )
