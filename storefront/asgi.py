"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers, hypercorn) importe `storefront.asgi:app`.
- Toute la configuration (routers, middlewares, handlers) est centralisée dans storefront.app_setup.factory.
"""
from storefront.app_setup.factory import create_app

app = create_app()
