import os
import secrets

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from schema_graph.rate_limit import limiter
from schema_graph.routers.schema_graph import router as schema_graph_router

app = FastAPI(title="Schema Graph API", version="0.1.0")


# --- Security: Optional API token authentication ---
# Set SCHEMA_GRAPH_API_TOKEN to require a Bearer token on /api/ endpoints.
# For single-user deployments, bind to 127.0.0.1 and leave this unset.
_api_token = os.environ.get("SCHEMA_GRAPH_API_TOKEN")

# Paths that don't require authentication
_PUBLIC_PATHS = {"/api/health"}


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if _api_token and path.startswith("/api/") and path not in _PUBLIC_PATHS:
            auth = request.headers.get("Authorization", "")
            token = auth[7:] if auth.startswith("Bearer ") else ""
            if not secrets.compare_digest(token, _api_token):
                return JSONResponse(
                    status_code=401,
                    content={"detail": "Invalid or missing API token"},
                )
        return await call_next(request)


if _api_token:
    app.add_middleware(AuthMiddleware)


# --- Rate limiting (slowapi, per-route limits on the routers) ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS: load origins from env (comma-separated), default to localhost dev server
_cors_env = os.environ.get("CORS_ORIGINS", "http://localhost:5173")
cors_origins = [o.strip() for o in _cors_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


# --- Security: HSTS and security headers ---
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    return response


app.include_router(schema_graph_router)


@app.get("/api/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
