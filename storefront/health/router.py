from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from storefront.config import Settings
from storefront.health.service import health_stripe_info, health_supabase_info
from storefront.utils.rate_limit import rate_limit_health_info
from storefront.utils.security import get_settings

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/dependencies")
def health_dependencies(request: Request, settings: Settings = Depends(get_settings)):
    supabase = health_supabase_info(settings)
    stripe = health_stripe_info(settings)
    ok = supabase["reachable"] and stripe["configured"]
    return JSONResponse(
        status_code=200 if ok else 503,
        content={
            "ok": ok,
            "supabase": supabase,
            "stripe": stripe,
            "rate_limit": rate_limit_health_info(request),
        },
    )
