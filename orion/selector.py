import logging
import random
from datetime import date

from flask import current_app, has_app_context

from . import repository
from .errors import AlreadyPlayedToday, GenerationFailure, NoEligibleChallenge, PersistenceError
from .models import CHALLENGE_TYPES

logger = logging.getLogger(__name__)

DEFAULT_BANDS = [
    (200, 1, "easy"),
    (500, 3, "medium"),
    (1000, 5, "hard"),
    (2000, 7, "expert"),
    (3500, 9, "master"),
    (None, 10, "legendary"),
]


def _bands():
    if not has_app_context():
        return DEFAULT_BANDS
    return current_app.config.get("XP_DIFFICULTY_BANDS") or DEFAULT_BANDS


def difficulty_band(xp, bands=None):
    """Return ``(numeric difficulty, label)`` for a player's XP."""
    bands = bands or _bands()
    for upper, difficulty, label in bands:
        if upper is None or (xp or 0) < upper:
            return difficulty, label
    return bands[-1][1], bands[-1][2]


def difficulty_label(difficulty):
    if difficulty <= 2:
        return "easy"
    if difficulty <= 4:
        return "medium"
    if difficulty <= 6:
        return "hard"
    if difficulty <= 8:
        return "expert"
    if difficulty <= 9:
        return "master"
    return "legendary"


def has_played_today(player, today=None):
    if player.last_played is None:
        return False
    return player.last_played.date() >= (today or date.today())


def check_daily_gate(player, today=None):
    if player.is_admin:
        return
    if has_played_today(player, today):
        raise AlreadyPlayedToday()


def select_challenge(player, exclude_types=(), require_unique=False, generator=None, today=None, rng=None):
    """Pick today's challenge for ``player``.

    Looks for an active challenge in one of the player's languages at the
    difficulty matching their XP. When none exists, one is generated; if
    generation fails, any active challenge passing the type and uniqueness
    filters is used instead.
    """
    rng = rng or random
    check_daily_gate(player, today)

    difficulty, label = difficulty_band(player.xp)
    languages = player.get_lang_list()
    exclude_types = [t for t in exclude_types if t]
    exclude_ids = player.completed_challenge_ids if require_unique else ()
    logger.info("Player %s has %s XP, target difficulty %s (%s)", player.id, player.xp, label, difficulty)

    candidates = repository.find_active_challenges(
        languages=languages,
        difficulty=difficulty,
        exclude_types=exclude_types,
        exclude_ids=exclude_ids,
    )

    if not candidates:
        generated = _generate(generator, languages, difficulty, exclude_types, rng)
        if generated is not None:
            candidates = [generated]
        else:
            logger.info("Falling back to any active challenge for player %s", player.id)
            candidates = repository.find_active_challenges(
                exclude_types=exclude_types, exclude_ids=exclude_ids
            )

    if not candidates:
        raise NoEligibleChallenge()

    challenge = rng.choice(candidates)
    logger.info(
        "Selected challenge %s (%s, %s, %s)",
        challenge.id, difficulty_label(challenge.difficulty), challenge.language, challenge.type,
    )
    return challenge


def _generate(generator, languages, difficulty, exclude_types, rng):
    types = [t for t in CHALLENGE_TYPES if t not in exclude_types]
    if generator is None or not languages or not types:
        return None
    language = rng.choice(languages)
    challenge_type = rng.choice(types)
    try:
        challenge = generator.generate(language, difficulty, challenge_type)
        return repository.save_challenge(challenge)
    except (GenerationFailure, PersistenceError, ValueError) as exc:
        logger.warning(
            "Challenge generation failed for %s %s (difficulty %s): %s",
            language, challenge_type, difficulty, exc,
        )
        return None


def public_view(challenge, max_attempts):
    """Challenge fields safe to show before it is solved."""
    return {
        "id": challenge.id,
        "title": challenge.title,
        "prompt": challenge.prompt,
        "codeSnippet": challenge.code_snippet,
        "difficulty": difficulty_label(challenge.difficulty),
        "language": challenge.language,
        "type": challenge.type,
        "xpReward": challenge.xp_reward,
        "attemptsRemaining": max_attempts,
    }
