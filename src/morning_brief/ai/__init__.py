# ABOUTME: AI integration module for Google Gemini.
# ABOUTME: Provides story summaries and narration scripts for daily briefings.

from morning_brief.ai.service import AIService, estimate_audio_duration

__all__ = ["AIService", "estimate_audio_duration"]
