"""
Application-layer exceptions.

These exceptions are used across the engine, service and infrastructure
layers. Routers translate them into HTTP status codes.
"""


class ProgressionError(Exception):
    """Base class for progression errors."""

    pass


class InvalidStateError(ProgressionError):
    """A snapshot violates an invariant the engine cannot work around.

    Examples: a plan with no weekly schedule, a session started for a day
    label that is not in the schedule, or an illegal session transition.
    Missing or out-of-range milestone data is not reported this way; the
    engine degrades to a generic phase label instead.
    """

    pass


class SessionStateError(InvalidStateError):
    """Illegal workout session status transition."""

    pass


class DuplicateAwardError(ProgressionError):
    """Attempt to award a badge key the user already holds.

    Raised and caught inside the engine; callers see a no-op success.
    """

    def __init__(self, badge_key: str):
        super().__init__(f"Badge '{badge_key}' already awarded")
        self.badge_key = badge_key


class ArithmeticBoundaryError(ProgressionError, ValueError):
    """Numeric input outside the allowed domain, e.g. a negative XP grant."""

    pass


class NotFoundError(ProgressionError):
    """A stats, plan or session record does not exist for the user."""

    pass


class PlanGenerationError(ProgressionError):
    """The plan generator could not produce a valid plan document."""

    pass


class PersistenceError(ProgressionError):
    """Error during an atomic progression write.

    Raised when the bundled update of stats, badges, plan and week rows
    fails. This could be due to database errors, constraint violations,
    or RPC failures.
    """

    pass
