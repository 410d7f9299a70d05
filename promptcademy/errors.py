"""Error types raised by PromptCademy services.

Each error carries the HTTP status the API surface converts it to.
"""

from typing import Any, Optional


class PromptCademyError(Exception):
  """Base class for errors surfaced to API callers."""

  status_code = 500

  def __init__(self, message: str):
    super().__init__(message)
    self.message = message


class ConfigurationError(PromptCademyError):
  """Fatal setup problem (missing credential, empty catalog). Not retryable."""

  status_code = 500


class ValidationError(PromptCademyError):
  """A required field is missing or malformed."""

  status_code = 400


class NotFoundError(PromptCademyError):
  status_code = 404


class ConflictError(PromptCademyError):
  status_code = 409


class AuthenticationError(PromptCademyError):
  status_code = 401


class UpstreamError(PromptCademyError):
  """Third-party API failure.

  Carries a safe fallback payload that is returned to the caller instead of
  the raw upstream error.
  """

  status_code = 500

  def __init__(self, message: str, fallback: Optional[dict[str, Any]] = None):
    super().__init__(message)
    self.fallback = fallback or {}
