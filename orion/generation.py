"""Challenge generators.

A generator builds a fully populated, *unsaved* ``Challenge`` or raises
``GenerationFailure``. Persisting is left to the caller so a failed
generation never leaves a partial record behind.
"""
import json
import logging
import random
import re
from datetime import datetime, timedelta

from openai import OpenAI, OpenAIError

from .challenge_bank import CHALLENGE_TEMPLATES
from .errors import GenerationFailure
from .models import Challenge

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a coding challenge generator. "
    "Create challenging but solvable programming problems."
)
TYPE_INSTRUCTIONS = {
    "fix_bug": (
        "Create a code snippet with a bug that needs to be fixed.",
        "What's wrong with this code?",
        "The fixed code",
    ),
    "complete_code": (
        "Create a code snippet with a missing part that needs to be completed.",
        "Complete the following code to achieve the described functionality.",
        "The complete code or just the missing part",
    ),
    "explain_output": (
        "Create a code snippet and ask what the output will be.",
        "What will be the output of this code?",
        "The expected output",
    ),
    "predict_outcome": (
        "Create a code snippet and ask what will happen when it runs (e.g., error, specific behavior).",
        "What happens when this code runs?",
        "The outcome (error message, behavior description, etc.)",
    ),
    "identify_pattern": (
        "Create a code snippet that implements a specific pattern or algorithm and ask to identify it.",
        "What pattern or algorithm does this code implement?",
        "The name of the pattern or algorithm",
    ),
}
REQUIRED_FIELDS = ("prompt", "codeSnippet", "correctAnswer", "explanation")
_JSON_OBJECT = re.compile(r"\{.*\}", re.S)


def audience_for(difficulty):
    if difficulty <= 3:
        return "beginner"
    if difficulty <= 7:
        return "intermediate"
    return "advanced"


def default_title(language, challenge_type):
    return f"{language.capitalize()} {challenge_type.replace('_', ' ')} Challenge"


class ChallengeGenerator:
    def generate(self, language, difficulty, challenge_type):
        raise NotImplementedError


class TemplateChallengeGenerator(ChallengeGenerator):
    """Builds challenges from the bundled template bank."""

    def __init__(self, templates=None, ttl_days=30, rng=None):
        self.templates = templates if templates is not None else CHALLENGE_TEMPLATES
        self.ttl_days = ttl_days
        self.rng = rng or random

    def generate(self, language, difficulty, challenge_type):
        options = self.templates.get(language, {}).get(challenge_type, [])
        if not options:
            raise GenerationFailure(f"No {challenge_type} template for {language}")
        template = self.rng.choice(options)
        challenge = Challenge(
            title=template.get("title") or default_title(language, challenge_type),
            language=language,
            difficulty=difficulty,
            type=challenge_type,
            prompt=template["prompt"],
            code_snippet=template["code_snippet"],
            correct_answer=template["correct_answer"],
            explanation=template["explanation"],
            xp_reward=max(10, difficulty * 10),
            active=True,
            expires_at=datetime.utcnow() + timedelta(days=self.ttl_days),
        )
        challenge.set_hints(template.get("hints"))
        return challenge


class OpenAIChallengeGenerator(ChallengeGenerator):
    """Asks a chat-completions model for a challenge as a JSON object."""

    def __init__(self, api_key=None, model="gpt-3.5-turbo", timeout=20.0, ttl_days=30, client=None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.ttl_days = ttl_days
        self.client = client

    def build_prompt(self, language, difficulty, challenge_type):
        task, prompt, answer = TYPE_INSTRUCTIONS.get(
            challenge_type,
            ("", "A clear instruction for the challenge", "The expected answer"),
        )
        shape = {
            "title": "A catchy title for the challenge",
            "prompt": prompt,
            "codeSnippet": "The code for the challenge",
            "correctAnswer": answer,
            "hints": ["Hint 1", "Hint 2", "Hint 3"],
            "explanation": "Detailed explanation of the solution",
        }
        return (
            f"Generate a coding challenge for {audience_for(difficulty)} {language} programmers. "
            f"{task} The response should be in JSON format with the following structure:\n"
            f"{json.dumps(shape, indent=2)}"
        )

    def parse(self, text):
        match = _JSON_OBJECT.search(text or "")
        if not match:
            raise GenerationFailure("No JSON object found in response")
        try:
            data = json.loads(match.group(0))
        except ValueError as exc:
            raise GenerationFailure("Failed to parse challenge data") from exc
        if not isinstance(data, dict) or not all(data.get(f) for f in REQUIRED_FIELDS):
            raise GenerationFailure("Missing required fields in challenge data")
        if not isinstance(data.get("hints"), list):
            data["hints"] = []
        return data

    def generate(self, language, difficulty, challenge_type):
        logger.info("Generating %s challenge for %s (difficulty %s)", challenge_type, language, difficulty)
        try:
            if self.client is None:
                self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self.build_prompt(language, difficulty, challenge_type)},
                ],
                temperature=0.7,
            )
        except OpenAIError as exc:
            raise GenerationFailure(f"OpenAI request failed: {exc}") from exc

        if not completion.choices:
            raise GenerationFailure("Invalid response from OpenAI API")
        data = self.parse(completion.choices[0].message.content)

        challenge = Challenge(
            title=data.get("title") or default_title(language, challenge_type),
            language=language,
            difficulty=difficulty,
            type=challenge_type,
            prompt=data["prompt"],
            code_snippet=data["codeSnippet"],
            correct_answer=data["correctAnswer"],
            explanation=data["explanation"],
            xp_reward=50 + difficulty * 10,
            active=True,
            expires_at=datetime.utcnow() + timedelta(days=self.ttl_days),
        )
        challenge.set_hints(str(h) for h in data["hints"])
        return challenge


def generator_from_config(config):
    if config.get("CHALLENGE_GENERATOR") == "openai":
        return OpenAIChallengeGenerator(
            api_key=config.get("OPENAI_API_KEY"),
            model=config.get("OPENAI_MODEL", "gpt-3.5-turbo"),
            timeout=config.get("GENERATION_TIMEOUT", 20.0),
            ttl_days=config.get("CHALLENGE_TTL_DAYS", 30),
        )
    return TemplateChallengeGenerator(ttl_days=config.get("CHALLENGE_TTL_DAYS", 30))
