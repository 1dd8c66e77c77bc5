"""Exception hierarchy for the skill-gap engine.

Three families matter to callers:

* ``OccupationDataError`` - the remote occupation service failed. Always
  recoverable; the cache manager turns it into cached or fallback data.
* ``InvalidInputError`` - the résumé or skill payload could not be parsed.
  Fatal for the request.
* ``CacheStoreError`` - a SQLite collection could not be read or written.
  Caching is best-effort, so callers log it and carry on.
"""

from __future__ import annotations


class SkillRoadmapError(Exception):
    """Base class for all errors raised by this package."""


class OccupationDataError(SkillRoadmapError):
    """The occupation data service could not produce a usable answer."""


class CredentialsMissingError(OccupationDataError):
    """O*NET credentials are not configured."""


class OccupationRequestError(OccupationDataError):
    """Transport failure, timeout, or non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OccupationResponseError(OccupationDataError):
    """The service answered, but the payload did not match the expected shape."""


class InvalidInputError(SkillRoadmapError):
    """Caller-supplied content is unusable."""


class InvalidResumeError(InvalidInputError):
    """Résumé payload is malformed."""


class SkillParseError(InvalidInputError):
    """Current-skill list is malformed."""


class CacheStoreError(SkillRoadmapError):
    """A cache collection could not be read or written."""


class LLMResponseError(SkillRoadmapError, ValueError):
    """LLM output did not contain the JSON object we asked for."""
