# ABOUTME: Briefing routes: read today's or a dated briefing, history, and on-demand generation.
# ABOUTME: Generation runs the full pipeline inside the request.

from datetime import UTC, date, datetime

import structlog
from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, ValidationError

from morning_brief.models import DailyBriefing
from morning_brief.pipeline.generator import GenerationResult, NoArticlesFoundError
from morning_brief.web.dependencies import BriefingStoreDep, GeneratorDep, SettingsDep
from morning_brief.web.responses import error_response

router = APIRouter(prefix="/api/briefings", tags=["briefings"])
log = structlog.get_logger()


class GenerateRequest(BaseModel):
    """Body for on-demand generation. All fields are optional."""

    date: str | None = None
    voice: str | None = None
    model: str | None = None
    force: bool = False


def parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def briefing_summary(briefing: DailyBriefing) -> dict:
    """Compact view of a generated briefing for the generate response."""
    return {
        "headline": briefing.full_briefing.headline,
        "story_count": briefing.full_briefing.story_count,
        "duration": briefing.full_briefing.duration,
        "has_audio": bool(briefing.full_briefing.audio_url),
        "categories": [
            {
                "category": brief.category,
                "headline": brief.headline,
                "story_count": brief.story_count,
                "has_audio": bool(brief.audio_url),
            }
            for brief in briefing.category_briefs
        ],
    }


@router.get("")
async def get_briefing(
    store: BriefingStoreDep,
    settings: SettingsDep,
    briefing_date: str | None = Query(None, alias="date"),
    history: bool = False,
):
    """Today's briefing, a specific date, or the recent history."""
    if history:
        entries = await store.history(settings.history_days)
        return {"success": True, "history": [e.model_dump(mode="json") for e in entries]}

    if briefing_date:
        target = parse_date(briefing_date)
        if target is None:
            return error_response(400, "Invalid date format, expected YYYY-MM-DD")
        briefing = await store.get(target)
        if briefing is None:
            return error_response(404, f"No briefing found for {briefing_date}")
    else:
        briefing = await store.get(datetime.now(UTC).date())
        if briefing is None:
            return error_response(
                404,
                "No briefing generated yet for today",
                hint="POST /api/briefings/generate to create one",
            )

    return {"success": True, "briefing": briefing.model_dump(mode="json")}


@router.get("/dates")
async def list_dates(store: BriefingStoreDep):
    """Dates with a stored briefing, most recent first."""
    dates = await store.list_dates()
    return {"success": True, "dates": [d.isoformat() for d in dates]}


@router.post("/generate")
async def generate_briefing(request: Request, generator: GeneratorDep):
    """Run the pipeline for today or a given date.

    A missing or unparsable body counts as an empty one.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    try:
        body = GenerateRequest.model_validate(payload or {})
    except ValidationError:
        return error_response(400, "Invalid request body")

    target = None
    if body.date:
        target = parse_date(body.date)
        if target is None:
            return error_response(400, "Invalid date format, expected YYYY-MM-DD")

    try:
        result: GenerationResult = await generator.generate(
            target, force=body.force, voice=body.voice, model=body.model
        )
    except NoArticlesFoundError as e:
        return error_response(404, str(e))
    except Exception as e:
        log.exception("api_generate_failed", date=body.date)
        return error_response(500, str(e) or "Failed to generate briefing")

    if result.status == "skipped":
        return {
            "success": True,
            "status": result.status,
            "date": result.date.isoformat(),
            "message": f"Briefing already exists for {result.date.isoformat()}",
        }

    return {
        "success": True,
        "status": result.status,
        "date": result.date.isoformat(),
        "processing_time": result.processing_time,
        "briefing": briefing_summary(result.briefing),
    }
