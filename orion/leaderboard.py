"""Denormalized ranking view over player progress.

Entries sort by XP, then wins, then streak, all descending. Exact ties fall
back to ascending user id so that ``top_n`` positions and ``rank_of`` counts
always agree.
"""
import logging
from datetime import datetime

from sqlalchemy import and_, func, or_

from .models import LeaderboardEntry, db

logger = logging.getLogger(__name__)

ORDERING = (
    LeaderboardEntry.xp.desc(),
    LeaderboardEntry.wins.desc(),
    LeaderboardEntry.streak.desc(),
    LeaderboardEntry.user_id.asc(),
)


def upsert(player):
    """Copy the player's current snapshot into their entry, creating it if absent.

    Does not commit; callers run it inside the same transaction as the
    progress update it mirrors.
    """
    entry = LeaderboardEntry.query.filter_by(user_id=player.id).first()
    if entry is None:
        entry = LeaderboardEntry(user_id=player.id)
        db.session.add(entry)
    entry.username = player.username
    entry.xp = player.xp or 0
    entry.level = player.level or 1
    entry.wins = player.wins or 0
    entry.streak = player.streak or 0
    entry.losses = player.losses or 0
    entry.games_played = player.games_played or 0
    entry.last_updated = datetime.utcnow()
    return entry


def remove(player_id):
    LeaderboardEntry.query.filter_by(user_id=player_id).delete()


def rename(player_id, username):
    entry = LeaderboardEntry.query.filter_by(user_id=player_id).first()
    if entry is not None:
        entry.username = username
    return entry


def top_n(n):
    entries = LeaderboardEntry.query.order_by(*ORDERING).limit(n).all()
    return [entry.to_dict(rank=position) for position, entry in enumerate(entries, start=1)]


def _better_than(entry):
    e = LeaderboardEntry
    return or_(
        e.xp > entry.xp,
        and_(e.xp == entry.xp, e.wins > entry.wins),
        and_(e.xp == entry.xp, e.wins == entry.wins, e.streak > entry.streak),
        and_(
            e.xp == entry.xp,
            e.wins == entry.wins,
            e.streak == entry.streak,
            e.user_id < entry.user_id,
        ),
    )


def rank_of(player_id):
    entry = LeaderboardEntry.query.filter_by(user_id=player_id).first()
    if entry is None:
        return None
    ahead = db.session.query(func.count(LeaderboardEntry.id)).filter(_better_than(entry)).scalar()
    return ahead + 1


def entry_for(player_id):
    entry = LeaderboardEntry.query.filter_by(user_id=player_id).first()
    if entry is None:
        return None
    return entry.to_dict(rank=rank_of(player_id))
