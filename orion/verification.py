import logging
import re

from .errors import VerificationError

logger = logging.getLogger(__name__)

HASH_COMMENT_LANGUAGES = {"python", "ruby"}
SLASH_COMMENT_LANGUAGES = {
    "javascript", "typescript", "java", "csharp", "cpp", "go", "php",
    "rust", "swift", "kotlin", "css",
}
SEMICOLON_LANGUAGES = {
    "javascript", "typescript", "java", "csharp", "cpp", "php", "css",
}
INDENT_LANGUAGES = {"python"}

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.S)
_LINE_SLASH_COMMENT = re.compile(r"(?m)//[^\n]*$")
_LINE_HASH_COMMENT = re.compile(r"(?m)#[^\n]*$")
_HTML_COMMENT = re.compile(r"<!--.*?-->", re.S)
_WHITESPACE = re.compile(r"\s+")
_SPACE_AROUND_PUNCT = re.compile(r"\s*([(){}\[\];,.:=+\-*/<>!&|])\s*")
_TRAILING_PUNCT = re.compile(r"[.!?;:]+$")
_CODE_CHARS = re.compile(r"[(){}\[\];=<>]")


def strip_comments(text, language):
    if language in SLASH_COMMENT_LANGUAGES:
        text = _BLOCK_COMMENT.sub("", text)
        text = _LINE_SLASH_COMMENT.sub("", text)
        if language == "php":
            text = _LINE_HASH_COMMENT.sub("", text)
    elif language in HASH_COMMENT_LANGUAGES:
        text = _LINE_HASH_COMMENT.sub("", text)
    elif language == "html":
        text = _HTML_COMMENT.sub("", text)
    return text


def _squash(text):
    text = _WHITESPACE.sub(" ", text).strip()
    return _SPACE_AROUND_PUNCT.sub(r"\1", text)


def _indented_lines(text):
    """Yield ``(depth, line)`` pairs, where depth counts enclosing indent levels.

    Only the nesting matters, so two-space and four-space bodies compare equal.
    """
    widths = [0]
    for line in text.split("\n"):
        if not line.strip():
            continue
        expanded = line.expandtabs(4)
        width = len(expanded) - len(expanded.lstrip())
        while width < widths[-1]:
            widths.pop()
        if width > widths[-1]:
            widths.append(width)
        yield len(widths) - 1, _squash(line)


def normalize_code(text, language):
    text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    text = strip_comments(text, language)
    if language in INDENT_LANGUAGES:
        return "\n".join("\t" * depth + line for depth, line in _indented_lines(text))
    text = _squash(text)
    if language in SEMICOLON_LANGUAGES:
        text = text.replace(";}", "}").rstrip(";")
    return text


def normalize_prose(text):
    text = _WHITESPACE.sub(" ", (text or "")).strip().lower().strip("'\"`")
    return _TRAILING_PUNCT.sub("", text).strip()


def looks_like_code(text):
    text = (text or "").strip()
    return "\n" in text or bool(_CODE_CHARS.search(text))


class AnswerVerifier:
    """Compare a submitted answer to the stored one, ignoring formatting noise.

    Code answers match after comments and whitespace are normalized for the
    challenge language, keeping block structure for Python. Plain-text
    answers (error messages, pattern names) also match case-insensitively
    without trailing punctuation or quotes.
    """

    def verify(self, correct_answer, submitted_answer, language):
        if not isinstance(correct_answer, str) or not isinstance(submitted_answer, str):
            logger.warning("Cannot compare non-text answers for %s", language)
            raise VerificationError()
        if normalize_code(correct_answer, language) == normalize_code(submitted_answer, language):
            return True
        if looks_like_code(correct_answer):
            return False
        return normalize_prose(correct_answer) == normalize_prose(submitted_answer)
