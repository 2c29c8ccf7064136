import os
from dotenv import load_dotenv
from pathlib import Path

load_dotenv()

basedir = Path(__file__).resolve().parent


def _env_flag(name: str, default: bool = False) -> bool:
    """Interpret typical truthy strings from environment variables."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "fallback-dev-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{basedir / 'instance' / 'orion.sqlite'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", default=False)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # challenge generation
    CHALLENGE_GENERATOR = os.getenv("CHALLENGE_GENERATOR", "template")  # template/openai
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
    GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "20"))

    # game tuning
    XP_DIFFICULTY_BANDS = [
        (200, 1, "easy"),
        (500, 3, "medium"),
        (1000, 5, "hard"),
        (2000, 7, "expert"),
        (3500, 9, "master"),
        (None, 10, "legendary"),
    ]
    XP_DECAY_PER_ATTEMPT = 0.15
    XP_FLOOR_RATIO = 0.25
    MAX_ATTEMPTS = 5
    LEADERBOARD_SIZE = 100

    # maintenance
    CHALLENGE_RETENTION_DAYS = int(os.getenv("CHALLENGE_RETENTION_DAYS", "7"))
    COMPLETED_GRACE_DAYS = int(os.getenv("COMPLETED_GRACE_DAYS", "1"))
    CHALLENGE_TTL_DAYS = int(os.getenv("CHALLENGE_TTL_DAYS", "30"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    CHALLENGE_GENERATOR = "template"
