"""
Error taxonomy shared by services and the HTTP layer.

Services raise these; backend.app translates them into responses.
None of them is fatal to the process.
"""

from __future__ import annotations

from typing import Optional


class MarketplaceError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str = "", fields: Optional[dict] = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.fields = fields or {}


class ValidationError(MarketplaceError):
    """Malformed or missing input; ``fields`` maps field name -> problem."""

    status_code = 400
    code = "validation_error"


class Unauthorized(MarketplaceError):
    status_code = 401
    code = "unauthorized"


class Forbidden(MarketplaceError):
    status_code = 403
    code = "forbidden"


class NotFound(MarketplaceError):
    status_code = 404
    code = "not_found"


class Conflict(MarketplaceError):
    status_code = 409
    code = "conflict"


class InvalidState(MarketplaceError):
    """Illegal state transition, e.g. approving a resolved transaction."""

    status_code = 409
    code = "invalid_state"
