# ABOUTME: Services module initialization.
# ABOUTME: Exports storage, newsletter, and push notification services.

from morning_brief.services.beehiiv import BeehiivClient
from morning_brief.services.briefing_store import (
    BriefingStore,
    DatabaseBriefingStore,
    FileBriefingStore,
    get_briefing_store,
)
from morning_brief.services.push_service import PushService
from morning_brief.services.storage import AudioStorage, StorageService
from morning_brief.services.subscriber_service import SubscriberService

__all__ = [
    "AudioStorage",
    "BeehiivClient",
    "BriefingStore",
    "DatabaseBriefingStore",
    "FileBriefingStore",
    "PushService",
    "StorageService",
    "SubscriberService",
    "get_briefing_store",
]
