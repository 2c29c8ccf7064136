"""Failure categories for the daily challenge game.

Each error carries a stable ``code`` the client can switch on and the HTTP
status the API answers with. A wrong answer is not an error.
"""


class OrionError(Exception):
    code = "error"
    status = 500
    message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {
            "status": "fail" if self.status < 500 else "error",
            "code": self.code,
            "message": self.message,
        }


class ValidationFailed(OrionError):
    code = "validation_failed"
    status = 400
    message = "Invalid request."


class AlreadyPlayedToday(OrionError):
    code = "already_played_today"
    status = 400
    message = "You have already played today. Come back tomorrow for a new challenge!"


class NoEligibleChallenge(OrionError):
    code = "no_eligible_challenge"
    status = 404
    message = "No challenges available. Please try again later."


class InvalidAttempt(OrionError):
    code = "invalid_attempt"
    status = 400
    message = "Attempt number must be between 1 and the maximum number of attempts."


class ChallengeNotFound(OrionError):
    code = "challenge_not_found"
    status = 404
    message = "Challenge not found"


class PlayerNotFound(OrionError):
    code = "player_not_found"
    status = 404
    message = "User not found"


class Forbidden(OrionError):
    code = "forbidden"
    status = 403
    message = "Unauthorized. Admin access required."


class VerificationError(OrionError):
    code = "verification_error"
    status = 503
    message = "Error verifying your answer. Please try again."


class GenerationFailure(OrionError):
    """Raised by challenge generators. Absorbed by the selector, never rendered."""

    code = "generation_failure"
    status = 503
    message = "Challenge generation failed."


class PersistenceError(OrionError):
    code = "persistence_error"
    status = 503
    message = "Error saving your progress. Please try again."
