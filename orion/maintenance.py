"""Daily batch jobs: retire stale challenges and top up the catalog."""
import logging
import random
from datetime import datetime

from . import repository
from .errors import GenerationFailure
from .models import CHALLENGE_TYPES, LANGUAGES

logger = logging.getLogger(__name__)

BAND_DIFFICULTIES = (1, 3, 5, 7, 9, 10)


def cleanup_challenges(retention_days=7, grace_days=1, now=None):
    """Purge old challenges and deactivate expired ones.

    Returns the number of rows touched by each rule.
    """
    now = now or datetime.utcnow()
    with repository.transaction():
        expired_removed = repository.delete_challenges_created_before(
            repository.days_ago(retention_days, now)
        )
        deactivated = repository.deactivate_expired_challenges(now)
        played_removed = repository.delete_played_challenges(repository.days_ago(grace_days, now))

    result = {
        "expiredRemoved": expired_removed,
        "deactivated": deactivated,
        "playedRemoved": played_removed,
    }
    logger.info(
        "Cleanup removed %s old challenges, deactivated %s, removed %s played",
        expired_removed, deactivated, played_removed,
    )
    return result


def generate_challenges(generator, count, languages=LANGUAGES, rng=None):
    """Generate ``count`` challenges over random languages, types and bands."""
    rng = rng or random
    created = []
    for _ in range(count):
        language = rng.choice(languages)
        challenge_type = rng.choice(CHALLENGE_TYPES)
        difficulty = rng.choice(BAND_DIFFICULTIES)
        try:
            challenge = generator.generate(language, difficulty, challenge_type)
        except GenerationFailure as exc:
            logger.warning("Skipping %s %s challenge: %s", language, challenge_type, exc)
            continue
        created.append(repository.save_challenge(challenge))
    logger.info("Generated %s/%s challenges", len(created), count)
    return created
