from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy.orm import validates
from datetime import datetime
import json
import math

db = SQLAlchemy()

LANGUAGES = (
    "python", "javascript", "java", "csharp", "cpp", "ruby", "go",
    "php", "rust", "swift", "typescript", "kotlin", "css", "html",
)
CHALLENGE_TYPES = (
    "fix_bug", "complete_code", "explain_output", "predict_outcome", "identify_pattern",
)
DEFAULT_LANGUAGES = "javascript,python"


def level_for_xp(xp):
    return math.floor(1 + math.sqrt((xp or 0) / 100))


class User(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(20), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    languages = db.Column(db.String(256), default=DEFAULT_LANGUAGES)  # comma-separated
    xp = db.Column(db.Integer, default=0, nullable=False)
    level = db.Column(db.Integer, default=1, nullable=False)
    wins = db.Column(db.Integer, default=0, nullable=False)
    losses = db.Column(db.Integer, default=0, nullable=False)
    streak = db.Column(db.Integer, default=0, nullable=False)
    games_played = db.Column(db.Integer, default=0, nullable=False)
    last_played = db.Column(db.DateTime, nullable=True)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    completions = db.relationship("ChallengeCompletion", backref="user", lazy="select")

    @validates("xp")
    def _sync_level(self, key, value):
        self.level = level_for_xp(value)
        return value

    @property
    def is_active(self):
        # flask_login refuses to log in inactive (soft-deleted) accounts
        return bool(self.active)

    def get_lang_list(self):
        return [l.strip() for l in (self.languages or "").split(",") if l.strip()]

    def set_languages(self, langs):
        self.languages = ",".join(langs)

    @property
    def completed_challenge_ids(self):
        return {c.challenge_id for c in self.completions}

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "languages": self.get_lang_list(),
            "xp": self.xp,
            "level": self.level,
            "wins": self.wins,
            "losses": self.losses,
            "streak": self.streak,
            "gamesPlayed": self.games_played,
            "lastPlayed": self.last_played.isoformat() if self.last_played else None,
            "completedChallenges": sorted(self.completed_challenge_ids),
            "isAdmin": self.is_admin,
        }


class Challenge(db.Model):
    __tablename__ = "challenges"
    __table_args__ = (db.Index("ix_challenges_lookup", "language", "difficulty", "active"),)

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    language = db.Column(db.String(20), nullable=False)
    difficulty = db.Column(db.Integer, nullable=False)  # 1..10
    type = db.Column(db.String(30), nullable=False)
    prompt = db.Column(db.Text, nullable=False)
    code_snippet = db.Column(db.Text, nullable=False)
    correct_answer = db.Column(db.Text, nullable=False)
    hints = db.Column(db.Text, nullable=True)  # JSON list
    explanation = db.Column(db.Text, nullable=False)
    xp_reward = db.Column(db.Integer, nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    completions = db.relationship(
        "ChallengeCompletion", backref="challenge", cascade="all, delete-orphan"
    )
    failures = db.relationship(
        "ChallengeFailure", backref="challenge", cascade="all, delete-orphan"
    )

    @validates("difficulty")
    def _check_difficulty(self, key, value):
        if not 1 <= int(value) <= 10:
            raise ValueError("difficulty must be between 1 and 10")
        return int(value)

    @validates("xp_reward")
    def _check_reward(self, key, value):
        if int(value) < 10:
            raise ValueError("xp_reward must be at least 10")
        return int(value)

    @validates("language")
    def _check_language(self, key, value):
        if value not in LANGUAGES:
            raise ValueError(f"unsupported language: {value}")
        return value

    @validates("type")
    def _check_type(self, key, value):
        if value not in CHALLENGE_TYPES:
            raise ValueError(f"unsupported challenge type: {value}")
        return value

    def get_hints(self):
        try:
            return json.loads(self.hints) if self.hints else []
        except ValueError:
            return []

    def set_hints(self, hints):
        self.hints = json.dumps(list(hints or []))


class ChallengeCompletion(db.Model):
    __tablename__ = "challenge_completions"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    challenge_id = db.Column(db.Integer, db.ForeignKey("challenges.id"), nullable=False)
    completed_at = db.Column(db.DateTime, default=datetime.utcnow)
    __table_args__ = (db.UniqueConstraint("user_id", "challenge_id"),)


class ChallengeFailure(db.Model):
    __tablename__ = "challenge_failures"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    challenge_id = db.Column(db.Integer, db.ForeignKey("challenges.id"), nullable=False)
    failed_at = db.Column(db.DateTime, default=datetime.utcnow)
    __table_args__ = (db.UniqueConstraint("user_id", "challenge_id"),)


class LeaderboardEntry(db.Model):
    __tablename__ = "leaderboard"
    __table_args__ = (db.Index("ix_leaderboard_order", "xp", "wins", "streak"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False)
    username = db.Column(db.String(20), nullable=False)
    xp = db.Column(db.Integer, default=0, nullable=False)
    level = db.Column(db.Integer, default=1, nullable=False)
    wins = db.Column(db.Integer, default=0, nullable=False)
    streak = db.Column(db.Integer, default=0, nullable=False)
    losses = db.Column(db.Integer, default=0, nullable=False)
    games_played = db.Column(db.Integer, default=0, nullable=False)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self, rank=None):
        return {
            "userId": self.user_id,
            "username": self.username,
            "xp": self.xp,
            "level": self.level,
            "wins": self.wins,
            "streak": self.streak,
            "losses": self.losses,
            "gamesPlayed": self.games_played,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
            "rank": rank,
        }
