import os
import tempfile
from datetime import datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from config import TestConfig
from orion import create_app
from orion.models import db, Challenge, User


@pytest.fixture
def app_instance():
    # Use a file-based sqlite DB to keep data across request contexts.
    db_fd, db_path = tempfile.mkstemp()

    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_path}"

    app = create_app(_Config)
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()
        os.close(db_fd)
        os.unlink(db_path)


@pytest.fixture
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture
def make_player(app_instance):
    def _make(username="player", xp=0, languages="python,javascript", **fields):
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=generate_password_hash("password123"),
            languages=languages,
            xp=xp,
            **fields,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_challenge(app_instance):
    def _make(language="python", difficulty=1, type="fix_bug", hints=None, **fields):
        challenge = Challenge(
            title=fields.pop("title", f"{language} {type} {difficulty}"),
            language=language,
            difficulty=difficulty,
            type=type,
            prompt=fields.pop("prompt", "What's wrong with this code?"),
            code_snippet=fields.pop("code_snippet", "print(1"),
            correct_answer=fields.pop("correct_answer", "print(1)"),
            explanation=fields.pop("explanation", "The call was missing a closing parenthesis."),
            xp_reward=fields.pop("xp_reward", 100),
            expires_at=fields.pop("expires_at", datetime.utcnow() + timedelta(days=30)),
            **fields,
        )
        challenge.set_hints(hints if hints is not None else ["Count the brackets.", "Look at the end of the line."])
        db.session.add(challenge)
        db.session.commit()
        return challenge

    return _make
