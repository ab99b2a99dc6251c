# ABOUTME: Web Push subscription routes.
# ABOUTME: Serves the VAPID public key and stores or removes browser subscriptions.

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from morning_brief.models import PushSubscriptionInfo
from morning_brief.web.dependencies import PushRepo, PushSvc
from morning_brief.web.responses import error_response

router = APIRouter(prefix="/api/push", tags=["push"])
log = structlog.get_logger()


class UnsubscribeRequest(BaseModel):
    endpoint: str | None = None


async def _read_json(request: Request) -> object:
    try:
        return await request.json()
    except ValueError:
        return None


@router.get("/subscribe")
async def public_key(push_service: PushSvc):
    """VAPID public key for the browser's PushManager.subscribe."""
    if not push_service.public_key:
        return error_response(503, "Push notifications not configured")
    return {"success": True, "public_key": push_service.public_key}


@router.post("/subscribe")
async def save_subscription(request: Request, push_service: PushSvc, repo: PushRepo):
    """Store a browser push subscription, replacing keys for a known endpoint."""
    if not push_service.is_configured:
        return error_response(503, "Push notifications not configured on server")
    if repo is None:
        return error_response(503, "Database not configured")

    try:
        subscription = PushSubscriptionInfo.model_validate(await _read_json(request))
    except ValidationError:
        return error_response(400, "Invalid subscription format")
    if not subscription.endpoint:
        return error_response(400, "Invalid subscription format")

    try:
        await repo.upsert(
            subscription.endpoint, subscription.keys.p256dh, subscription.keys.auth
        )
    except SQLAlchemyError as e:
        log.error("push_subscription_save_failed", error=str(e))
        return error_response(500, "Failed to save subscription")

    log.info("push_subscription_saved", endpoint=subscription.endpoint[:50])
    return {"success": True, "message": "Subscription saved"}


@router.delete("/subscribe")
async def remove_subscription(request: Request, repo: PushRepo):
    """Remove a browser push subscription by endpoint."""
    try:
        body = UnsubscribeRequest.model_validate(await _read_json(request) or {})
    except ValidationError:
        return error_response(400, "Endpoint required")
    if not body.endpoint:
        return error_response(400, "Endpoint required")
    if repo is None:
        return error_response(503, "Database not configured")

    removed = await repo.delete_by_endpoint(body.endpoint)
    return {
        "success": removed,
        "message": "Subscription removed" if removed else "Subscription not found",
    }
