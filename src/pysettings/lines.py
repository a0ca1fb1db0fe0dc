"""Classification of single settings file lines."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .messages import DEFAULT_MESSAGES, Diagnostic, MessageKind, diagnostic

COMMENT_TAG = "#"
START_SECTION_TAG = "["
END_SECTION_TAG = "]"
ASSIGN_TAG = "="

# Section for pairs found before any header or under ``[]``.
GLOBAL_SECTION = "GLOBAL"


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class SectionHeader:
    name: str


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: str


@dataclass(frozen=True)
class Malformed:
    diagnostic: Diagnostic


LineClassification = Blank | SectionHeader | KeyValue | Malformed


def strip_comment(line: str) -> str:
    index = line.find(COMMENT_TAG)
    return line if index == -1 else line[:index]


def split_comment(line: str) -> tuple[str, str]:
    """Return ``(content, comment)`` where *comment* starts at the marker."""
    index = line.find(COMMENT_TAG)
    if index == -1:
        return line, ""
    return line[:index], line[index:]


def classify_line(
    raw_line: str,
    line_number: int,
    file_path: str,
    messages: Sequence[str] = DEFAULT_MESSAGES,
) -> LineClassification:
    """Classify *raw_line* found at *line_number* of *file_path*.

    Comments are removed before anything else, so ``[NAME] # note`` and
    ``key = value # note`` are valid lines.  Errors are returned as
    :class:`Malformed` rather than raised so the caller decides how to abort.
    """
    text = strip_comment(raw_line).strip()
    if not text:
        return Blank()

    starts = text.startswith(START_SECTION_TAG)
    ends = text.endswith(END_SECTION_TAG)
    if starts and ends:
        name = text[1:-1]
        return SectionHeader(name or GLOBAL_SECTION)
    if starts:
        return Malformed(
            diagnostic(
                messages,
                MessageKind.MISSING_END_SECTION_TAG,
                END_SECTION_TAG,
                line_number,
                file_path,
            )
        )
    if ends:
        return Malformed(
            diagnostic(
                messages,
                MessageKind.MISSING_START_SECTION_TAG,
                START_SECTION_TAG,
                line_number,
                file_path,
            )
        )

    key, sep, rest = text.partition(ASSIGN_TAG)
    if not sep:
        return Malformed(
            diagnostic(
                messages, MessageKind.MISSING_ASSIGN_TAG, ASSIGN_TAG, line_number, file_path
            )
        )
    key = key.strip()
    if not key:
        return Malformed(
            diagnostic(messages, MessageKind.MISSING_KEY, line_number, file_path)
        )
    # further assign tags are dropped from the value, not treated as new pairs
    value = rest.replace(ASSIGN_TAG, "").strip()
    return KeyValue(key, value)
