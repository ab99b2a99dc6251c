# ABOUTME: Newsletter signup route.
# ABOUTME: Validates the email, then subscribes via Beehiiv and the local subscriber table.

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel, ValidationError

from morning_brief.web.dependencies import SubscriberSvc
from morning_brief.web.responses import error_response

router = APIRouter(prefix="/api", tags=["newsletter"])
log = structlog.get_logger()


class NewsletterRequest(BaseModel):
    email: str | None = None


@router.post("/newsletter")
async def subscribe(request: Request, service: SubscriberSvc):
    """Handle newsletter subscription request."""
    try:
        body = NewsletterRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return error_response(400, "Valid email required")

    try:
        outcome = await service.subscribe(body.email)
    except ValueError as e:
        return error_response(400, str(e))
    except Exception:
        log.exception("newsletter_subscribe_failed")
        return error_response(500, "Something went wrong. Please try again.")

    if not outcome.success:
        return error_response(500, outcome.message)

    response = {"success": True, "message": outcome.message}
    if outcome.note:
        response["note"] = outcome.note
    return response
