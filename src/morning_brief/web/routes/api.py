# ABOUTME: API routes for scheduler automation, admin backfill, and provider diagnostics.
# ABOUTME: Endpoints for health, daily cron, historical generation, usage, and TTS test.

from datetime import date

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import Response
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from morning_brief.pipeline.backfill import date_range, generate_range
from morning_brief.pipeline.daily import run_daily_job
from morning_brief.pipeline.generator import NoArticlesFoundError
from morning_brief.tts.errors import TTSError
from morning_brief.tts.polly import PollyClient
from morning_brief.web.dependencies import ElevenLabsDep, GeneratorDep, PollyDep, PushSvc
from morning_brief.web.middleware.auth import AdminVerified, CronVerified
from morning_brief.web.responses import error_response

router = APIRouter(prefix="/api", tags=["api"])
log = structlog.get_logger()

SAMPLE_SCRIPT = (
    "Good morning. Here's your daily briefing from Morning Brief. "
    "Today's top story: Global markets are showing mixed signals as investors await "
    "the Federal Reserve's upcoming decision on interest rates. "
    "What to watch: Expect volatility in the coming days as economic data releases continue. "
    "That's your Morning Brief for today."
)

HIGH_USAGE_PERCENT = 80


class HealthResponse(BaseModel):
    """Response model for health check."""

    success: bool = True
    status: str
    version: str = "0.1.0"


class HistoricalRequest(BaseModel):
    """Explicit dates, or an inclusive start/end range."""

    dates: list[date] | None = None
    start_date: date | None = Field(
        None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: date | None = Field(None, validation_alias=AliasChoices("end_date", "endDate"))


class TTSTestRequest(BaseModel):
    text: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for load balancer."""
    return HealthResponse(status="healthy")


@router.get("/cron/daily")
async def cron_daily(
    caller: CronVerified,
    generator: GeneratorDep,
    push_service: PushSvc,
):
    """Generate today's briefing and notify push subscribers.

    Called by Cloud Scheduler.
    """
    log.info("api_cron_daily", caller=caller)
    try:
        result = await run_daily_job(generator, push_service)
    except NoArticlesFoundError as e:
        return error_response(404, str(e))
    except Exception as e:
        log.exception("api_cron_daily_failed")
        return error_response(500, str(e) or "Daily job failed")

    response: dict = {"success": True, "skipped": result.skipped, "message": result.message}
    if result.generation is not None:
        response["date"] = result.generation.date.isoformat()
        response["processing_time"] = result.generation.processing_time
    if result.push is not None:
        response["push"] = {
            "sent": result.push.sent,
            "failed": result.push.failed,
            "expired": len(result.push.expired),
        }
    return response


@router.post("/admin/generate-historical")
async def generate_historical(
    request: Request,
    caller: AdminVerified,
    generator: GeneratorDep,
):
    """Backfill briefings for explicit dates or a date range."""
    try:
        body = HistoricalRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return error_response(400, "Provide dates or startDate and endDate as YYYY-MM-DD")

    if body.dates:
        dates = body.dates
    elif body.start_date and body.end_date:
        try:
            dates = date_range(body.start_date, body.end_date)
        except ValueError as e:
            return error_response(400, str(e))
    else:
        return error_response(400, "Provide dates or startDate and endDate")

    log.info("api_generate_historical", caller=caller, dates=len(dates))
    result = await generate_range(generator, dates)
    return {
        "success": True,
        "summary": result.summary(),
        "results": [item.model_dump(mode="json") for item in result.items],
    }


@router.get("/usage")
async def usage(client: ElevenLabsDep):
    """ElevenLabs character quota with a rough days-remaining estimate."""
    current = client.get_usage()
    if current is None:
        return error_response(500, "ElevenLabs not configured or unable to fetch usage")

    daily = client.settings.elevenlabs_daily_characters
    percent = current.percent_used
    return {
        "success": True,
        "elevenlabs": {
            "credits_used": current.character_count,
            "credits_limit": current.character_limit,
            "credits_remaining": current.remaining_characters,
            "percent_used": percent,
            "estimated_days_remaining": max(current.remaining_characters, 0) // daily,
        },
        "tip": (
            "Consider upgrading your plan for more credits"
            if percent > HIGH_USAGE_PERCENT
            else "Credits looking good! Using the Flash model saves 50%."
        ),
    }


def _polly_audio(polly: PollyClient, text: str) -> Response:
    if not polly.is_configured:
        return error_response(500, "AWS credentials not configured")
    try:
        audio = polly.synthesize(text)
    except TTSError as e:
        log.error("api_tts_test_failed", error=str(e))
        return error_response(500, "Failed to generate audio", details=str(e))

    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Content-Disposition": 'inline; filename="briefing.mp3"'},
    )


@router.get("/tts/test")
async def tts_test_sample(polly: PollyDep):
    """Narrate a fixed sample script with Polly."""
    return _polly_audio(polly, SAMPLE_SCRIPT)


@router.post("/tts/test")
async def tts_test_custom(request: Request, polly: PollyDep):
    """Narrate caller-provided text with Polly."""
    try:
        body = TTSTestRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return error_response(400, "Invalid request body")
    if not body.text:
        return error_response(400, "Text is required")
    return _polly_audio(polly, body.text)
