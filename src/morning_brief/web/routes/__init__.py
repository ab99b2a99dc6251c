# ABOUTME: Routes module initialization.
# ABOUTME: Exports all route modules for the FastAPI app.

from morning_brief.web.routes import api, briefings, newsletter, push

__all__ = ["api", "briefings", "newsletter", "push"]
