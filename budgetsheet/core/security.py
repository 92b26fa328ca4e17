from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import Request

from budgetsheet.core.config import Settings, get_settings
from budgetsheet.core.errors import AuthError
from budgetsheet.models.identity import Identity
from budgetsheet.services.google_oauth import GoogleOAuthClient

"""Bearer-token authentication dependency.

Flow:
    - Dev bypass (``bypass_auth`` outside production) injects a fixed identity.
    - Otherwise the ``Authorization: Bearer <token>`` header is required (401).
    - The token is resolved to email/name through the provider's userinfo
      endpoint; a rejected token raises InvalidTokenError (403).
    - Successful resolutions are cached per process for
      ``identity_cache_ttl_seconds`` so each request does not hit the provider.
"""

logger = logging.getLogger("budgetsheet.security")

DEV_IDENTITY = Identity(email="dev@test.com", name="Dev User", access_token="dev-token")


@dataclass
class _CacheEntry:
    identity: Identity
    expires_at: float


class IdentityCache:
    """Token -> Identity cache with TTL-bound entries."""

    def __init__(self, ttl_seconds: int):
        self._ttl = ttl_seconds
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, token: str) -> Optional[Identity]:
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            if entry.expires_at <= time.monotonic():
                self._entries.pop(token, None)
                return None
            return entry.identity

    def put(self, token: str, identity: Identity) -> None:
        if self._ttl <= 0:
            return
        with self._lock:
            self._purge_expired()
            self._entries[token] = _CacheEntry(
                identity=identity, expires_at=time.monotonic() + self._ttl
            )

    def _purge_expired(self) -> None:
        now = time.monotonic()
        expired = [k for k, v in self._entries.items() if v.expires_at <= now]
        for k in expired:
            self._entries.pop(k, None)


def bearer_token(request: Request) -> str:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("access token required")
    return token.strip()


def resolve_identity(
    token: str, settings: Settings, cache: Optional[IdentityCache] = None
) -> Identity:
    if cache is not None:
        cached = cache.get(token)
        if cached is not None:
            return cached
    info = GoogleOAuthClient(settings).user_info(token)
    identity = Identity(email=info.email, name=info.name, access_token=token)
    if cache is not None:
        cache.put(token, identity)
    logger.debug("resolved identity for %s", identity.email)
    return identity


def _settings_for(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def _cache_for(request: Request, settings: Settings) -> IdentityCache:
    cache = getattr(request.app.state, "identity_cache", None)
    if cache is None:
        cache = IdentityCache(settings.identity_cache_ttl_seconds)
        request.app.state.identity_cache = cache
    return cache


def get_current_identity(request: Request) -> Identity:
    settings = _settings_for(request)
    if settings.dev_bypass_active:
        return DEV_IDENTITY
    token = bearer_token(request)
    return resolve_identity(token, settings, _cache_for(request, settings))
