"""Persistence operations used by the game core.

Every write the core performs goes through here so the selector, evaluator
and maintenance jobs never build queries of their own.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError

from .errors import PersistenceError
from .models import (
    Challenge,
    ChallengeCompletion,
    ChallengeFailure,
    User,
    db,
    level_for_xp,
)

logger = logging.getLogger(__name__)


@contextmanager
def transaction():
    """Commit on success; roll back and raise PersistenceError on a database error."""
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database write failed")
        raise PersistenceError() from exc
    except Exception:
        db.session.rollback()
        raise


# -----------------------------------------------------------------------------
# Players
# -----------------------------------------------------------------------------
def get_player(player_id):
    return db.session.get(User, player_id)


def get_player_by_username(username):
    return User.query.filter_by(username=username).first()


def _apply_counters(player, now, **changes):
    """Atomically bump counters in the row, then re-read it inside the same transaction.

    ``changes`` maps a column to an increment, or to ``None`` to reset it to 0.
    """
    values = {
        name: 0 if amount is None else getattr(User, name) + amount
        for name, amount in changes.items()
    }
    values["last_played"] = now
    db.session.execute(
        update(User).where(User.id == player.id).values(**values),
        execution_options={"synchronize_session": False},
    )
    db.session.refresh(player)
    player.level = level_for_xp(player.xp)


def _record_once(model, player, challenge_id):
    """Return True when a new row was added, False when one already existed."""
    existing = model.query.filter_by(user_id=player.id, challenge_id=challenge_id).first()
    if existing:
        return False
    db.session.add(model(user_id=player.id, challenge_id=challenge_id))
    return True


def add_completed_challenge(player, challenge_id):
    """Add a challenge to the player's completed set. Adding twice is a no-op."""
    return _record_once(ChallengeCompletion, player, challenge_id)


def record_win(player, challenge, xp_gained, now=None):
    """Count a solved challenge once; a repeated submission returns False and changes nothing."""
    if not add_completed_challenge(player, challenge.id):
        return False
    _apply_counters(player, now or datetime.now(), xp=xp_gained, wins=1, streak=1, games_played=1)
    return True


def record_loss(player, challenge, now=None):
    if not _record_once(ChallengeFailure, player, challenge.id):
        return False
    _apply_counters(player, now or datetime.now(), streak=None, losses=1, games_played=1)
    return True


def reset_last_played(player):
    with transaction():
        player.last_played = None
    return player


# -----------------------------------------------------------------------------
# Challenges
# -----------------------------------------------------------------------------
def get_challenge(challenge_id):
    try:
        return db.session.get(Challenge, int(challenge_id))
    except (TypeError, ValueError):
        return None


def find_active_challenges(languages=None, difficulty=None, exclude_types=(), exclude_ids=()):
    query = Challenge.query.filter(Challenge.active.is_(True))
    if languages is not None:
        query = query.filter(Challenge.language.in_(list(languages)))
    if difficulty is not None:
        query = query.filter(Challenge.difficulty == difficulty)
    if exclude_types:
        query = query.filter(Challenge.type.notin_(list(exclude_types)))
    if exclude_ids:
        query = query.filter(Challenge.id.notin_(list(exclude_ids)))
    return query.order_by(Challenge.id).all()


def save_challenge(challenge):
    with transaction():
        db.session.add(challenge)
    return challenge


def delete_challenges_created_before(cutoff):
    stale = Challenge.query.filter(Challenge.created_at < cutoff).all()
    for challenge in stale:
        db.session.delete(challenge)
    return len(stale)


def deactivate_expired_challenges(now):
    result = db.session.execute(
        update(Challenge)
        .where(Challenge.expires_at < now, Challenge.active.is_(True))
        .values(active=False),
        execution_options={"synchronize_session": False},
    )
    return result.rowcount


def delete_played_challenges(cutoff):
    played = Challenge.query.filter(
        Challenge.created_at < cutoff,
        or_(Challenge.completions.any(), Challenge.failures.any()),
    ).all()
    for challenge in played:
        db.session.delete(challenge)
    return len(played)


def days_ago(days, now=None):
    return (now or datetime.utcnow()) - timedelta(days=days)
