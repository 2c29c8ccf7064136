import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from fractions import Fraction

from flask import current_app, has_app_context

from . import leaderboard, repository
from .errors import ChallengeNotFound, InvalidAttempt, VerificationError
from .verification import AnswerVerifier

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
XP_DECAY_PER_ATTEMPT = 0.15
XP_FLOOR_RATIO = 0.25


@dataclass
class AttemptResult:
    correct: bool
    attempts_remaining: int
    xp_gained: int = None
    hint: str = None
    explanation: str = None
    game_over: bool = False
    rank: int = None
    player: dict = field(default=None, repr=False)

    def to_dict(self):
        data = {"correct": self.correct, "attemptsRemaining": self.attempts_remaining}
        if self.correct:
            data.update(
                xpGained=self.xp_gained,
                newXpTotal=self.player["xp"],
                newLevel=self.player["level"],
                wins=self.player["wins"],
                streak=self.player["streak"],
                losses=self.player["losses"],
                gamesPlayed=self.player["gamesPlayed"],
                rank=self.rank,
                explanation=self.explanation,
            )
        else:
            data["hint"] = self.hint
            if self.game_over:
                data.update(gameOver=True, explanation=self.explanation)
        return data


def _setting(name, default):
    if not has_app_context():
        return default
    return current_app.config.get(name, default)


def xp_for_attempt(reward, attempt_number, decay=None, floor_ratio=None):
    """XP earned for solving a challenge worth ``reward`` on ``attempt_number``.

    Each extra attempt costs ``decay`` of the reward, never dropping below
    ``floor_ratio`` of it.
    """
    # exact arithmetic so that 100 * 0.85 floors to 85
    decay = Fraction(str(XP_DECAY_PER_ATTEMPT if decay is None else decay))
    floor_ratio = Fraction(str(XP_FLOOR_RATIO if floor_ratio is None else floor_ratio))
    decayed = reward * (1 - decay * (attempt_number - 1))
    return math.floor(max(decayed, reward * floor_ratio))


def _as_attempt_number(value):
    # JSON clients may send 2.0 for 2
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAttempt()
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidAttempt()
        value = int(value)
    return value


def hint_for(hints, attempt_number):
    if not hints:
        return None
    return hints[min(attempt_number - 1, len(hints) - 1)]


def submit_attempt(player, challenge_id, answer, attempt_number, verifier=None, now=None):
    """Check ``answer`` against the challenge and record the outcome for ``player``.

    A wrong answer before the last attempt only returns a hint. A right answer
    awards decayed XP; a wrong last answer ends the game and resets the streak.
    """
    max_attempts = _setting("MAX_ATTEMPTS", MAX_ATTEMPTS)
    attempt_number = _as_attempt_number(attempt_number)
    if not 1 <= attempt_number <= max_attempts:
        raise InvalidAttempt()

    challenge = repository.get_challenge(challenge_id)
    if challenge is None:
        raise ChallengeNotFound()

    verifier = verifier or AnswerVerifier()
    try:
        correct = verifier.verify(challenge.correct_answer, answer, challenge.language)
    except VerificationError:
        raise
    except Exception as exc:
        logger.exception("Answer verification failed for challenge %s", challenge.id)
        raise VerificationError() from exc

    hints = challenge.get_hints()
    now = now or datetime.now()

    if correct:
        gained = xp_for_attempt(
            challenge.xp_reward,
            attempt_number,
            _setting("XP_DECAY_PER_ATTEMPT", XP_DECAY_PER_ATTEMPT),
            _setting("XP_FLOOR_RATIO", XP_FLOOR_RATIO),
        )
        with repository.transaction():
            recorded = repository.record_win(player, challenge, gained, now)
            leaderboard.upsert(player)
        if recorded:
            logger.info(
                "Player %s solved challenge %s on attempt %s (+%s XP)",
                player.id, challenge.id, attempt_number, gained,
            )
        else:
            logger.info("Player %s already solved challenge %s, no XP awarded", player.id, challenge.id)
            gained = 0
        return AttemptResult(
            correct=True,
            attempts_remaining=max_attempts - attempt_number,
            xp_gained=gained,
            explanation=challenge.explanation,
            rank=leaderboard.rank_of(player.id),
            player=player.to_dict(),
        )

    if attempt_number < max_attempts:
        return AttemptResult(
            correct=False,
            attempts_remaining=max_attempts - attempt_number,
            hint=hint_for(hints, attempt_number),
        )

    with repository.transaction():
        if repository.record_loss(player, challenge, now):
            logger.info("Player %s ran out of attempts on challenge %s", player.id, challenge.id)
        leaderboard.upsert(player)
    return AttemptResult(
        correct=False,
        attempts_remaining=0,
        hint=hint_for(hints, attempt_number),
        explanation=challenge.explanation,
        game_over=True,
        player=player.to_dict(),
    )
