import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from pulse.config import settings
from pulse.core.errors import ApiError
from pulse.modules.auth import routes as auth_routes
from pulse.modules.context import routes as context_routes
from pulse.modules.onboarding import routes as onboarding_routes
from pulse.modules.goals import routes as goals_routes
from pulse.modules.planner import routes as planner_routes
from pulse.modules.entities import routes as entities_routes
from pulse.modules.chat import routes as chat_routes
from pulse.modules.calls import routes as calls_routes
from pulse.modules.imports import routes as imports_routes
from pulse.modules.navigation import routes as navigation_routes
from pulse.modules.integrations import routes as integrations_routes
from pulse.modules.admin import routes as admin_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(context_routes.router, prefix="/api/v1")
app.include_router(onboarding_routes.router, prefix="/api/v1")
app.include_router(goals_routes.router, prefix="/api/v1")
app.include_router(planner_routes.router, prefix="/api/v1")
app.include_router(entities_routes.router, prefix="/api/v1")
app.include_router(chat_routes.router, prefix="/api/v1")
app.include_router(calls_routes.router, prefix="/api/v1")
app.include_router(imports_routes.router, prefix="/api/v1")
app.include_router(navigation_routes.router, prefix="/api/v1")
app.include_router(integrations_routes.router, prefix="/api/v1")
app.include_router(admin_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info(f"Application startup ({settings.environment})")
    if not settings.ai_gateway_api_key:
        logger.warning("AI gateway API key not set; agent chat will fail")
    if not settings.elevenlabs_api_key:
        logger.warning("ElevenLabs API key not set; call campaigns will fail")
    if not settings.clerk_webhook_secret:
        logger.warning("Clerk webhook secret not set; /auth/webhook will reject events")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to pulse-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    return {"status": "ready"}
