"""
Middlewares transverses de l’application.
- register_basic_middlewares: CORS, TrustedHost et confiance en X-Forwarded-*.
- register_security_middleware: en-têtes de sécurité et CSP.
- register_preflight_middleware: réponse 204 aux OPTIONS sur /api/* (clients navigateur).
Notes:
- L’ordre d’ajout est important: le dernier middleware ajouté s’exécute en premier,
  le preflight est donc enregistré en dernier par la factory.
"""
from fastapi import Request, FastAPI
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from storefront.config import Settings

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

def register_basic_middlewares(app: FastAPI, settings: Settings) -> None:
    """
    Ajoute les middlewares « de base »:
    - CORSMiddleware: origines configurées (toutes par défaut), en-têtes exposés aux réponses.
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    - ProxyHeadersMiddleware: fait confiance aux en-têtes du proxy (x-forwarded-*).
    """
    allow_all = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        # credentials incompatibles avec l'origine "*"
        allow_credentials=not allow_all,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts + ["*"] if allow_all else settings.allowed_hosts,
    )
    # Fait confiance aux en-têtes X-Forwarded-* (Render, Nginx, etc.)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

def register_security_middleware(app: FastAPI, settings: Settings) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if settings.hsts_enabled:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")

        # CSP: API JSON + pages de doc Swagger
        csp_connect = ["'self'"]
        if settings.supabase_url:
            csp_connect.append(settings.supabase_url)
        swagger_cdns = ["https://cdn.jsdelivr.net", "https://unpkg.com"]
        csp_connect.extend(swagger_cdns)

        csp = (
            "default-src 'self'; "
            "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            "img-src 'self' data: https://fastapi.tiangolo.com; "
            f"style-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"script-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"connect-src {' '.join(csp_connect)}"
        )
        response.headers["Content-Security-Policy"] = csp
        return response

def register_preflight_middleware(app: FastAPI) -> None:
    """
    Court-circuite les OPTIONS sur /api/*: 204, corps vide, en-têtes CORS permissifs.
    Les autres chemins passent par CORSMiddleware.
    """
    @app.middleware("http")
    async def api_preflight(request: Request, call_next):
        if request.method == "OPTIONS" and request.url.path.startswith("/api/"):
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)
        return await call_next(request)
