"""Error taxonomy shared by the core and its edges."""


class TradePlanError(Exception):
    """Base class for all TradePlan errors."""


class InputValidationError(TradePlanError, ValueError):
    """User-supplied input (edit, paste, import) could not be accepted.

    Raised before any state is replaced, so the caller's prior state is
    always left intact.
    """


class InsightServiceError(TradePlanError):
    """The external insight service failed (transport, HTTP status, content)."""


class InsightValidationError(InsightServiceError):
    """The insight service answered, but the payload failed schema validation.

    Attributes:
        errors: Human-readable list of every problem found in the batch.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors: list[str] = list(errors or [])
