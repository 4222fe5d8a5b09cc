"""Budget Engine Server - Entry point.

Runs the MCP server and the period endpoints over HTTP for Cloud Run.
MCP requests, the period trigger and the scheduled job are protected by
a shared bearer token (SERVICE_TOKEN) held by the trusted upstream that
resolves end-user identity.
"""

import hmac
import logging
from datetime import date

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, Mount

from .shell.mcp_server import mcp, get_config, get_period_manager, parse_day


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def is_authorized(request: Request) -> bool:
    """Check the bearer token against SERVICE_TOKEN."""
    expected = get_config().service_token
    if not expected:
        return False
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return False
    return hmac.compare_digest(auth_header.replace("Bearer ", "", 1), expected)


async def _read_json(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for Cloud Run."""
    return JSONResponse({"status": "healthy", "service": "budget-engine"})


async def create_period(request: Request) -> JSONResponse:
    """Idempotent createPeriod trigger for one user."""
    if not is_authorized(request):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    body = await _read_json(request)
    user_id = body.get("user_id")
    if not user_id or not isinstance(user_id, str):
        return JSONResponse({"error": "Missing user_id in request body"}, status_code=400)

    try:
        today = parse_day(body.get("today"))
    except (TypeError, ValueError):
        return JSONResponse({"error": "Invalid date format. Use YYYY-MM-DD."}, status_code=400)

    result = get_period_manager().create(user_id, today)
    status_code = 200 if result.ok else 400
    return JSONResponse({"success": result.ok, **result.model_dump(mode="json")}, status_code=status_code)


async def run_weekly_period_job(request: Request) -> JSONResponse:
    """Scheduled job: create this week's period for every calibrated user."""
    if not is_authorized(request):
        return JSONResponse({"error": "Unauthorized - missing auth header"}, status_code=401)

    logger.info("Weekly period creation job started")
    try:
        summary = get_period_manager().run_weekly_job(date.today())
    except Exception:
        logger.exception("Weekly period creation job failed")
        return JSONResponse({"error": "Weekly period job failed"}, status_code=500)

    return JSONResponse({"success": True, **summary.model_dump(mode="json")})


# ==================== Auth Middleware ====================


class MCPAuthMiddleware(BaseHTTPMiddleware):
    """Reject MCP requests without the service bearer token."""

    async def dispatch(self, request: Request, call_next):
        # Non-MCP routes check the token themselves or are public
        if not request.url.path.startswith("/mcp"):
            return await call_next(request)

        if not is_authorized(request):
            logger.warning("Rejected unauthenticated MCP request")
            return JSONResponse({"error": "Unauthorized"}, status_code=401)

        return await call_next(request)


# ==================== Create ASGI App ====================


def create_app() -> Starlette:
    """Create the Starlette application with MCP at root.

    The MCP streamable_http_app() handles /mcp/ internally when mounted at root.
    We use its lifespan context to ensure proper initialization.
    """
    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/periods", create_period, methods=["POST"]),
        Route("/jobs/weekly-periods", run_weekly_period_job, methods=["POST"]),
        Mount("/", app=mcp_app),
    ]

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["http://localhost:8081"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(MCPAuthMiddleware),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )

    return app


# Create app at module level for Cloud Run
app = create_app()


def main() -> None:
    """Run the server."""
    config = get_config()
    logger.info("Starting budget engine on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
