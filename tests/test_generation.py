import json
import random
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from orion.errors import GenerationFailure
from orion.generation import (
    OpenAIChallengeGenerator,
    TemplateChallengeGenerator,
    audience_for,
    generator_from_config,
)
from orion.models import Challenge


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content=None, error=None):
    completions = FakeCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


VALID_PAYLOAD = {
    "title": "Loop Trouble",
    "prompt": "What's wrong with this code?",
    "codeSnippet": "for i in range(10) print(i)",
    "correctAnswer": "for i in range(10): print(i)",
    "hints": ["Look at the loop header."],
    "explanation": "The for statement needs a colon.",
}


def test_template_generator_builds_unsaved_challenge(app_instance):
    generator = TemplateChallengeGenerator(rng=random.Random(0), ttl_days=5)
    challenge = generator.generate("python", 3, "fix_bug")

    assert isinstance(challenge, Challenge)
    assert challenge.id is None
    assert (challenge.language, challenge.difficulty, challenge.type) == ("python", 3, "fix_bug")
    assert challenge.xp_reward == 30
    assert challenge.get_hints()
    assert challenge.active


def test_template_generator_without_template_fails(app_instance):
    with pytest.raises(GenerationFailure):
        TemplateChallengeGenerator().generate("kotlin", 1, "fix_bug")


def test_openai_generator_parses_json_inside_prose(app_instance):
    content = "Sure! Here you go:\n" + json.dumps(VALID_PAYLOAD) + "\nEnjoy."
    client, completions = fake_client(content)
    generator = OpenAIChallengeGenerator(client=client, model="test-model")

    challenge = generator.generate("python", 8, "fix_bug")

    assert challenge.title == "Loop Trouble"
    assert challenge.correct_answer == VALID_PAYLOAD["correctAnswer"]
    assert challenge.xp_reward == 130
    assert challenge.get_hints() == ["Look at the loop header."]
    request = completions.requests[0]
    assert request["model"] == "test-model"
    assert "advanced python programmers" in request["messages"][1]["content"]


def test_openai_generator_defaults_title_and_hints(app_instance):
    payload = dict(VALID_PAYLOAD, hints="not a list")
    payload.pop("title")
    client, _ = fake_client(json.dumps(payload))

    challenge = OpenAIChallengeGenerator(client=client).generate("javascript", 2, "complete_code")

    assert challenge.title == "Javascript complete code Challenge"
    assert challenge.get_hints() == []


@pytest.mark.parametrize(
    "content",
    [
        "no json here",
        "{not valid json}",
        json.dumps(dict(VALID_PAYLOAD, explanation="")),
    ],
)
def test_openai_generator_rejects_bad_responses(app_instance, content):
    client, _ = fake_client(content)
    with pytest.raises(GenerationFailure):
        OpenAIChallengeGenerator(client=client).generate("python", 1, "fix_bug")


def test_openai_api_errors_become_generation_failures(app_instance):
    client, _ = fake_client(error=OpenAIError("rate limited"))
    with pytest.raises(GenerationFailure):
        OpenAIChallengeGenerator(client=client).generate("python", 1, "fix_bug")


def test_audience_wording():
    assert [audience_for(d) for d in (1, 3, 4, 7, 8, 10)] == [
        "beginner", "beginner", "intermediate", "intermediate", "advanced", "advanced",
    ]


def test_generator_from_config():
    assert isinstance(generator_from_config({"CHALLENGE_GENERATOR": "template"}), TemplateChallengeGenerator)
    generator = generator_from_config({"CHALLENGE_GENERATOR": "openai", "OPENAI_MODEL": "gpt-4o-mini"})
    assert isinstance(generator, OpenAIChallengeGenerator)
    assert generator.model == "gpt-4o-mini"
