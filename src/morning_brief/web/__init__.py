# ABOUTME: Web package for the Morning Brief JSON API.
# ABOUTME: The application factory lives in morning_brief.web.app.
