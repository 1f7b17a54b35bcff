from fastapi import Request, HTTPException, Depends
from typing import Optional, Dict, Any
from storefront.config import Settings

def bearer_token(request: Request) -> Optional[str]:
    """Token 'Authorization: Bearer <jwt>' ou None (jamais d'erreur ici)."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header[:7].lower() == "bearer ":
        return auth_header[7:].strip() or None
    return None

def get_settings(request: Request) -> Settings:
    """Dépendance FastAPI: Settings injectés par la factory (app.state.settings)."""
    return request.app.state.settings

def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        from storefront.auth.repository import get_user_from_access_token
        user = get_user_from_access_token(token, settings)
    except Exception:
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    return {"id": user.get("id"), "email": user.get("email"), "metadata": user.get("user_metadata") or {}, "token": token}

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user
