# ABOUTME: Database module initialization.
# ABOUTME: Exports ORM models, repositories, and session helpers.

from morning_brief.db.models import Base, Briefing, PushSubscription, Story, Subscriber
from morning_brief.db.repository import (
    BriefingRepository,
    PushSubscriptionRepository,
    SubscriberRepository,
)
from morning_brief.db.session import close_db, get_session, init_db

__all__ = [
    "Base",
    "Briefing",
    "BriefingRepository",
    "PushSubscription",
    "PushSubscriptionRepository",
    "Story",
    "Subscriber",
    "SubscriberRepository",
    "close_db",
    "get_session",
    "init_db",
]
