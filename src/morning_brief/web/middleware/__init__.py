# ABOUTME: Request authentication dependencies for protected endpoints.
# ABOUTME: Re-exports the scheduler and admin verification aliases.

from morning_brief.web.middleware.auth import AdminVerified, CronVerified

__all__ = ["AdminVerified", "CronVerified"]
