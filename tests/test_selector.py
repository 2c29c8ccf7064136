import random
from datetime import date, datetime, timedelta

import pytest

from orion import repository
from orion.errors import AlreadyPlayedToday, GenerationFailure, NoEligibleChallenge
from orion.generation import TemplateChallengeGenerator
from orion.models import Challenge, db
from orion.selector import public_view, select_challenge


class FailingGenerator:
    def __init__(self):
        self.calls = []

    def generate(self, language, difficulty, challenge_type):
        self.calls.append((language, difficulty, challenge_type))
        raise GenerationFailure("model unavailable")


def test_picks_challenge_in_players_band_and_language(make_player, make_challenge):
    player = make_player(xp=150, languages="python")
    easy = make_challenge(language="python", difficulty=1)
    make_challenge(language="python", difficulty=3)
    make_challenge(language="java", difficulty=1)

    assert select_challenge(player).id == easy.id


def test_master_player_gets_difficulty_nine(make_player, make_challenge):
    player = make_player(xp=2500, languages="python")
    make_challenge(language="python", difficulty=1)
    master = make_challenge(language="python", difficulty=9)

    assert select_challenge(player).id == master.id


def test_random_choice_among_matches(make_player, make_challenge):
    player = make_player(languages="python")
    ids = {make_challenge(difficulty=1).id for _ in range(3)}
    picked = {select_challenge(player, rng=random.Random(seed)).id for seed in range(30)}
    assert picked <= ids
    assert len(picked) > 1


def test_excluded_types_are_skipped(make_player, make_challenge):
    player = make_player(languages="python")
    make_challenge(type="fix_bug")
    wanted = make_challenge(type="explain_output")

    chosen = select_challenge(player, exclude_types=["fix_bug"])
    assert chosen.id == wanted.id


def test_unique_skips_completed_challenges(make_player, make_challenge):
    player = make_player(languages="python")
    done = make_challenge()
    fresh = make_challenge()
    repository.add_completed_challenge(player, done.id)
    db.session.commit()

    for seed in range(10):
        assert select_challenge(player, require_unique=True, rng=random.Random(seed)).id == fresh.id


def test_inactive_challenges_are_ignored(make_player, make_challenge):
    player = make_player(languages="python")
    make_challenge(active=False)
    with pytest.raises(NoEligibleChallenge):
        select_challenge(player)


def test_generates_challenge_when_band_is_empty(make_player, make_challenge):
    player = make_player(xp=600, languages="python")
    make_challenge(difficulty=1)
    generator = TemplateChallengeGenerator(rng=random.Random(1))

    chosen = select_challenge(player, exclude_types=["predict_outcome"], generator=generator, rng=random.Random(3))

    assert chosen.id is not None
    assert chosen.difficulty == 5
    assert chosen.language == "python"
    assert Challenge.query.count() == 2


def test_falls_back_to_any_active_challenge_when_generation_fails(make_player, make_challenge):
    player = make_player(xp=600, languages="python")
    other = make_challenge(language="java", difficulty=2, type="complete_code")
    make_challenge(language="java", difficulty=2, type="fix_bug")
    generator = FailingGenerator()

    chosen = select_challenge(player, exclude_types=["fix_bug"], generator=generator)

    assert chosen.id == other.id
    assert len(generator.calls) == 1
    language, difficulty, challenge_type = generator.calls[0]
    assert (language, difficulty) == ("python", 5)
    assert challenge_type != "fix_bug"


def test_no_eligible_challenge_when_everything_fails(make_player):
    player = make_player(languages="python")
    with pytest.raises(NoEligibleChallenge):
        select_challenge(player, generator=FailingGenerator())


def test_second_request_same_day_is_rejected(make_player, make_challenge):
    make_challenge()
    player = make_player(languages="python", last_played=datetime.now())
    with pytest.raises(AlreadyPlayedToday):
        select_challenge(player)


def test_played_yesterday_can_play_again(make_player, make_challenge):
    challenge = make_challenge()
    player = make_player(languages="python", last_played=datetime.now() - timedelta(days=1))
    assert select_challenge(player).id == challenge.id


def test_admin_is_never_blocked(make_player, make_challenge):
    challenge = make_challenge()
    admin = make_player(username="admin", languages="python", is_admin=True, last_played=datetime.now())
    assert select_challenge(admin, today=date.today()).id == challenge.id


def test_public_view_hides_answer(make_challenge):
    challenge = make_challenge(difficulty=7)
    view = public_view(challenge, 5)
    assert view["difficulty"] == "expert"
    assert view["attemptsRemaining"] == 5
    assert "correctAnswer" not in view
    assert "explanation" not in view
