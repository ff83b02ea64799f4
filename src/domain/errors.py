"""Errors raised by the domain and service layers.

HTTP-facing errors carry the status code the API answers with; the routers
never catch them, `src.main` renders them.
"""


class TradeSpinError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(TradeSpinError):
    status_code = 400


class Unauthenticated(TradeSpinError):
    status_code = 401


class Forbidden(TradeSpinError):
    status_code = 403


class NotFound(TradeSpinError):
    status_code = 404


class ServiceUnavailable(TradeSpinError):
    status_code = 503


class VerificationError(Exception):
    """A spin proof could not be trusted."""


class TamperedProof(VerificationError):
    pass


class ExpiredProof(VerificationError):
    pass
