"""
Factory d’application pour les entrypoints (storefront.asgi, tests).
Ordonne les étapes d’initialisation de manière lisible et testable.
"""
from typing import Optional
from fastapi import FastAPI
from storefront.config import Settings, get_settings
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_preflight_middleware, register_security_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - Settings sur app.state (lus par les dépendances des vues)
      - middlewares de base, sécurité, preflight /api/*
      - gestionnaires d’exceptions et routers (API v1, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    settings = settings or get_settings()
    app = FastAPI(title="K-Beauty Storefront Checkout", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limit_enabled = None
    register_basic_middlewares(app, settings)
    register_security_middleware(app, settings)
    register_preflight_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
