"""
Gestionnaires d’exceptions utilisés par la factory.
- CheckoutError (taxonomie paiements): statut porté par l'exception, message public seulement.
- HTTPException: corps {"error": detail} (contrat des clients du storefront).
- RequestValidationError: 400 {"error": ...} au lieu du 422 FastAPI.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from storefront.payments.errors import CheckoutError

logger = logging.getLogger(__name__)

def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg") or "Invalid value"
    return f"{loc}: {msg}" if loc else msg

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers JSON.
    - Les détails internes (SDK, base) ne sortent jamais: seul public_message est rendu.
    - Les en-têtes portés par HTTPException (ex: Retry-After du rate limiter) sont conservés.
    """
    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        if exc.status_code >= 500:
            logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})
