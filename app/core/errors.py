"""Exception hierarchy for the scorecard engine.

Every error carries a stable ``code`` so the engine boundary can turn it
into an :class:`~app.schemas.result.OperationResult` and the HTTP layer can
map it onto a status code.
"""
from typing import Any, List, Optional


class ScorecardError(Exception):
    """Base exception for all scorecard errors."""

    code = "scorecard_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.code


class NotAuthenticated(ScorecardError):
    """No caller identity."""

    code = "not_authenticated"


class NotFound(ScorecardError):
    """Role or metric absent, or not owned by the caller."""

    code = "not_found"


class ValidationError(ScorecardError):
    """Input rejected before any store mutation."""

    code = "validation_error"


class PersistenceError(ScorecardError):
    """A store call failed."""

    code = "persistence_error"


class PartialBatchFailure(ScorecardError):
    """Some items of a batch operation failed; the rest stay committed."""

    code = "partial_batch_failure"

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []
