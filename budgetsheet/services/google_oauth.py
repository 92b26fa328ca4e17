"""Google OAuth2 authorization-code flow helpers.

Builds the consent URL, exchanges codes and refresh tokens at the token
endpoint, and resolves an access token to the caller's profile. Network
access goes through ``services.http_client`` with the configured timeout.
"""

from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict

from budgetsheet.core.config import Settings
from budgetsheet.core.errors import AuthError, InvalidTokenError, ValidationError
from budgetsheet.services.http_client import HttpError, get_json, post_form

logger = logging.getLogger("budgetsheet.oauth")

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

SCOPES = (
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
)


@dataclass(frozen=True)
class UserInfo:
    id: str
    email: str
    name: str
    picture: str = ""

    def as_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "picture": self.picture,
        }


class GoogleOAuthClient:
    def __init__(self, settings: Settings):
        self.settings = settings

    def _require_client(self) -> None:
        if not self.settings.google_client_id or not self.settings.google_client_secret:
            raise AuthError("OAuth client is not configured")

    def authorization_url(self) -> str:
        self._require_client()
        params = {
            "client_id": self.settings.google_client_id,
            "redirect_uri": self.settings.google_redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{AUTH_URL}?{urllib.parse.urlencode(params)}"

    def _token_request(self, data: Dict[str, str]) -> Dict[str, Any]:
        self._require_client()
        payload = {
            "client_id": self.settings.google_client_id,
            "client_secret": self.settings.google_client_secret,
            **data,
        }
        try:
            return post_form(TOKEN_URL, payload, timeout=self.settings.http_timeout_seconds)
        except HttpError as e:
            logger.warning("token endpoint rejected request: %s", e)
            if e.status is not None and 400 <= e.status < 500:
                raise InvalidTokenError("authorization grant was rejected") from e
            raise AuthError("authentication provider unavailable") from e

    def exchange_code(self, code: str) -> Dict[str, Any]:
        if not code:
            raise ValidationError("authorization code is required")
        return self._token_request(
            {
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.settings.google_redirect_uri,
            }
        )

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        if not refresh_token:
            raise ValidationError("refresh token is required")
        return self._token_request(
            {"refresh_token": refresh_token, "grant_type": "refresh_token"}
        )

    def user_info(self, access_token: str) -> UserInfo:
        try:
            data = get_json(
                USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.settings.http_timeout_seconds,
            )
        except HttpError as e:
            if e.status in (400, 401, 403):
                raise InvalidTokenError("invalid or expired token") from e
            logger.warning("userinfo lookup failed: %s", e)
            raise AuthError("authentication provider unavailable") from e
        email = data.get("email")
        if not email:
            raise InvalidTokenError("token does not grant the email scope")
        return UserInfo(
            id=str(data.get("id", "")),
            email=email,
            name=data.get("name") or email,
            picture=data.get("picture", ""),
        )
