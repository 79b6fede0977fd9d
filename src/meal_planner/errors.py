"""Typed failures raised by the planning core.

Each error carries the HTTP status the API reports for it, so route handlers
never need to translate exceptions themselves.
"""


class MealPlannerError(Exception):
    """Base class for errors surfaced to callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MealPlannerError):
    """Malformed profile, ingredient or grocery input."""

    status_code = 400


class NotFoundError(MealPlannerError):
    """A referenced user, plan, meal or item does not exist."""

    status_code = 404


class UpstreamTimeout(MealPlannerError):
    """The recipe service did not answer in time."""

    status_code = 504


class UpstreamFailure(MealPlannerError):
    """The recipe service answered with an error or could not be reached."""

    status_code = 500


class DataUnavailable(MealPlannerError):
    """No catalog data is available to build meals from."""

    status_code = 504


class PartialBatchFailure(MealPlannerError):
    """A single batch entry was rejected; the rest of the batch proceeds."""

    status_code = 400

    def __init__(self, message: str, entry: object = None) -> None:
        super().__init__(message)
        self.entry = entry
