import json
import logging
import urllib.parse
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from budgetsheet.core.config import Settings
from budgetsheet.core.errors import BudgetSheetError
from budgetsheet.core.security import get_current_identity
from budgetsheet.models.identity import Identity
from budgetsheet.routers.deps import get_settings_dep
from budgetsheet.services.google_oauth import GoogleOAuthClient

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("budgetsheet.auth")

_TOKEN_FIELDS = ("access_token", "refresh_token", "expires_in", "token_type", "scope")


class CallbackIn(BaseModel):
    code: str = Field(..., min_length=1)


class RefreshIn(BaseModel):
    refresh_token: str = Field(..., min_length=1)


def get_oauth_client(settings: Settings = Depends(get_settings_dep)) -> GoogleOAuthClient:
    return GoogleOAuthClient(settings)


def _tokens(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {k: raw[k] for k in _TOKEN_FIELDS if k in raw}


def _login(client: GoogleOAuthClient, code: str) -> Dict[str, Any]:
    tokens = _tokens(client.exchange_code(code))
    user = client.user_info(tokens.get("access_token", ""))
    logger.info("login completed for %s", user.email)
    return {"tokens": tokens, "user": user.as_dict()}


@router.get("/google/url", summary="Consent URL for the OAuth flow")
async def google_auth_url(client: GoogleOAuthClient = Depends(get_oauth_client)):
    return {"auth_url": client.authorization_url()}


@router.get("/google/callback", summary="OAuth redirect target; bounces to the frontend")
def google_callback_redirect(
    code: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    client: GoogleOAuthClient = Depends(get_oauth_client),
    settings: Settings = Depends(get_settings_dep),
):
    base = settings.frontend_url.rstrip("/")
    if error or not code:
        logger.warning("oauth callback without code: %s", error or "missing code")
        return RedirectResponse(f"{base}/?auth=error", status_code=302)
    try:
        result = _login(client, code)
    except BudgetSheetError as e:
        logger.warning("oauth callback failed: %s", e.detail)
        return RedirectResponse(f"{base}/?auth=error", status_code=302)
    query = urllib.parse.urlencode(
        {
            "auth": "success",
            "user": json.dumps(result["user"]),
            "tokens": json.dumps(result["tokens"]),
        }
    )
    return RedirectResponse(f"{base}/?{query}", status_code=302)


@router.post("/google/callback", summary="Exchange an authorization code for tokens")
def google_callback(
    payload: CallbackIn, client: GoogleOAuthClient = Depends(get_oauth_client)
):
    return _login(client, payload.code)


@router.post("/refresh", summary="Refresh an access token")
def refresh(payload: RefreshIn, client: GoogleOAuthClient = Depends(get_oauth_client)):
    return {"tokens": _tokens(client.refresh(payload.refresh_token))}


@router.get("/me", summary="The authenticated caller")
async def me(identity: Identity = Depends(get_current_identity)):
    return {"email": identity.email, "name": identity.name}
