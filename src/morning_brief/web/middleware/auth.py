# ABOUTME: Bearer authentication for scheduler and admin endpoints.
# ABOUTME: Accepts a shared secret, or a Google OIDC token from Cloud Scheduler.

import secrets
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from morning_brief.config import get_settings

log = structlog.get_logger()

GOOGLE_ISSUERS = ("https://accounts.google.com", "accounts.google.com")


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:]


def _matches(token: str | None, secret: str) -> bool:
    return token is not None and secrets.compare_digest(token.encode(), secret.encode())


def verify_oidc_token(token: str, audience: str) -> str:
    """Verify a Google-signed OIDC token and return its email or subject.

    Raises:
        HTTPException: If the token is invalid or from an unexpected issuer.
    """
    try:
        claims = id_token.verify_oauth2_token(token, google_requests.Request(), audience=audience)
    except ValueError as e:
        log.warning("oidc_invalid_token", error=str(e))
        raise HTTPException(status_code=401, detail="Invalid OIDC token") from e

    issuer = claims.get("iss")
    if issuer not in GOOGLE_ISSUERS:
        log.warning("oidc_invalid_issuer", issuer=issuer)
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    email = claims.get("email", claims.get("sub"))
    log.info("oidc_verified", email=email)
    return email


async def verify_cron_request(request: Request) -> str | None:
    """Authorize a scheduled job call.

    Returns the caller identity, or None when no protection is configured.

    Raises:
        HTTPException: If protection is configured and the caller fails it.
    """
    settings = get_settings()
    secret = settings.cron_secret.get_secret_value() if settings.cron_secret else ""

    if not secret and not settings.scheduler_audience:
        log.debug("cron_auth_skipped", reason="not_configured")
        return None

    token = _bearer_token(request)
    if secret and _matches(token, secret):
        return "cron_secret"

    if settings.scheduler_audience and token:
        return verify_oidc_token(token, settings.scheduler_audience)

    log.warning("cron_unauthorized")
    raise HTTPException(status_code=401, detail="Unauthorized")


async def verify_admin_request(request: Request) -> str | None:
    """Authorize an admin call with ADMIN_SECRET, falling back to CRON_SECRET.

    Raises:
        HTTPException: If a secret is configured and the bearer token differs.
    """
    settings = get_settings()
    secret = settings.admin_secret or settings.cron_secret
    if secret is None:
        log.debug("admin_auth_skipped", reason="not_configured")
        return None

    if not _matches(_bearer_token(request), secret.get_secret_value()):
        log.warning("admin_unauthorized")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return "admin_secret"


CronVerified = Annotated[str | None, Depends(verify_cron_request)]
AdminVerified = Annotated[str | None, Depends(verify_admin_request)]
