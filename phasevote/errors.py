"""
errors.py  —  Failure kinds raised by the election core.

Every failure carries a short `kind` string so the host layer can surface
it to callers without inspecting exception classes.
"""


class ElectionError(Exception):
    kind = "ElectionError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class UnauthorizedError(ElectionError):
    kind = "Unauthorized"


class WrongPhaseError(ElectionError):
    """Operation invoked outside the phase it requires."""

    kind = "WrongPhase"

    def __init__(self, required, message: str = ""):
        self.required = required
        super().__init__(message or f"Operation requires phase {required.value}.")


class EmptyInputError(ElectionError):
    kind = "EmptyInput"


class InvalidIdentityError(ElectionError):
    kind = "InvalidIdentity"


class AlreadyAuthorizedError(ElectionError):
    kind = "AlreadyAuthorized"


class AlreadyVotedError(ElectionError):
    kind = "AlreadyVoted"


class NotFoundError(ElectionError):
    kind = "NotFound"


class NoWinnerError(ElectionError):
    kind = "NoWinner"


class PreconditionFailedError(ElectionError):
    kind = "PreconditionFailed"


class AuthenticationError(ElectionError):
    """Signed command rejected by the host before reaching the core."""

    kind = "AuthenticationFailed"
