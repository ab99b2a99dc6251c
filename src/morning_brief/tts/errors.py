# ABOUTME: Exception hierarchy for text-to-speech providers.
# ABOUTME: Lets the narrator tell configuration, auth and quota failures apart.


class TTSError(Exception):
    """A provider failed to produce audio for a script."""


class TTSNotConfiguredError(TTSError):
    """Provider credentials are missing."""


class TTSAuthError(TTSError):
    """Provider rejected the credentials."""


class TTSQuotaError(TTSError):
    """Provider rate limit or character quota exhausted."""
