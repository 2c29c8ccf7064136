import os

from werkzeug.security import generate_password_hash

from orion import create_app
from orion.challenge_bank import CHALLENGE_TEMPLATES
from orion.generation import TemplateChallengeGenerator
from orion.leaderboard import upsert
from orion.maintenance import BAND_DIFFICULTIES
from orion.models import db, Challenge, User

app = create_app()

with app.app_context():
    if not User.query.filter_by(username="admin").first():
        admin = User(
            username="admin",
            email="admin@example.com",
            is_admin=True,
            xp=0,
            password_hash=generate_password_hash(os.getenv("ADMIN_PASSWORD", "admin12345")),
        )
        db.session.add(admin)
        db.session.flush()
        upsert(admin)
        db.session.commit()
        print("Seeded admin user.")

    # one challenge per template and difficulty band
    if Challenge.query.count() == 0:
        generator = TemplateChallengeGenerator(ttl_days=app.config["CHALLENGE_TTL_DAYS"])
        count = 0
        for language, by_type in CHALLENGE_TEMPLATES.items():
            for challenge_type in by_type:
                for difficulty in BAND_DIFFICULTIES:
                    db.session.add(generator.generate(language, difficulty, challenge_type))
                    count += 1
        db.session.commit()
        print(f"Seeded {count} challenges.")
