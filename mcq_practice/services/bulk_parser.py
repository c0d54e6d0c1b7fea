"""
Bulk question parser.

Turns the plain-text import format into structured question records:

    QUESTION: What is 2 + 2?
    TOPIC: Mathematics
    SUBTOPIC: Arithmetic
    DIFFICULTY: easy
    OPTION A: 3
    OPTION B: 4
    OPTION C: 5
    OPTION D: 6
    CORRECT: B
    EXPLANATION: Basic addition.

Blocks are separated by blank lines, or simply start with a new
``QUESTION:`` line. No I/O happens here.
"""

import re
from dataclasses import dataclass

from mcq_practice.core.exceptions import ValidationError
from mcq_practice.models.question import OPTION_LETTERS

QUESTION_MARKER = "QUESTION:"

# prefix -> field
_PREFIXES = (
    ("QUESTION:", "text"),
    ("TOPIC:", "topic"),
    ("SUBTOPIC:", "subtopic"),
    ("DIFFICULTY:", "difficulty"),
    ("OPTION A:", "option_a"),
    ("OPTION B:", "option_b"),
    ("OPTION C:", "option_c"),
    ("OPTION D:", "option_d"),
    ("CORRECT:", "correct_option"),
    ("EXPLANATION:", "explanation"),
)

_REQUIRED = ("text", "topic", "option_a", "option_b", "option_c", "option_d", "correct_option")

_BLANK_LINE = re.compile(r"\n\s*\n")


@dataclass
class ParsedQuestion:
    text: str
    topic: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: str
    subtopic: str | None = None
    difficulty: str = "medium"
    explanation: str | None = None


def split_blocks(text: str) -> list[str]:
    """
    Split raw text into question blocks.

    Blank-line separation wins when it produces more than one block;
    otherwise every line starting with ``QUESTION:`` opens a new block.
    """
    text = text.replace("\r\n", "\n")
    blocks = [b for b in _BLANK_LINE.split(text) if b.strip()]
    if len(blocks) > 1:
        return blocks

    blocks = []
    current: list[str] = []
    for line in text.split("\n"):
        if line.strip().startswith(QUESTION_MARKER) and current:
            blocks.append("\n".join(current))
            current = []
        current.append(line)
    if current:
        blocks.append("\n".join(current))
    return [b for b in blocks if b.strip()]


def parse_block(block: str) -> ParsedQuestion | None:
    """Parse one block; returns None when a required field is missing."""
    fields: dict[str, str] = {}
    for raw in block.split("\n"):
        line = raw.strip()
        for prefix, field in _PREFIXES:
            if line.startswith(prefix):
                fields[field] = line[len(prefix):].strip()
                break

    if not all(fields.get(name) for name in _REQUIRED):
        return None

    return ParsedQuestion(
        text=fields["text"],
        topic=fields["topic"],
        option_a=fields["option_a"],
        option_b=fields["option_b"],
        option_c=fields["option_c"],
        option_d=fields["option_d"],
        correct_option=fields["correct_option"],
        subtopic=fields.get("subtopic") or None,
        difficulty=fields.get("difficulty") or "medium",
        explanation=fields.get("explanation") or None,
    )


def parse_bulk_questions(text: str) -> list[ParsedQuestion]:
    """
    Parse a bulk upload.

    Incomplete blocks are dropped silently. A single accepted block with a
    CORRECT value outside A-D rejects the whole batch.

    Raises:
        ValidationError: empty input, nothing parseable, or bad CORRECT values.
    """
    if not text or not text.strip():
        raise ValidationError("No content provided")

    questions = [q for q in (parse_block(b) for b in split_blocks(text)) if q is not None]
    if not questions:
        raise ValidationError(
            "No valid questions found. Please check the format."
        )

    invalid = [q for q in questions if q.correct_option not in OPTION_LETTERS]
    if invalid:
        raise ValidationError(
            f"{len(invalid)} question(s) have incorrect 'CORRECT' values. "
            "Only A, B, C, or D are allowed."
        )
    return questions
