"""Diagnostic message tables and formatting.

Every error produced by :mod:`pysettings` is rendered through a fixed-size
table of templates indexed by :class:`MessageKind`.  Templates use ``{}``
placeholders which are filled positionally, so a localized table only has to
keep the placeholders in the same order as the English one.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

import tomlkit

PLACEHOLDER = "{}"


class MessageKind(IntEnum):
    OPENING_FILE_ERROR = 0
    MISSING_START_SECTION_TAG = 1
    MISSING_END_SECTION_TAG = 2
    MISSING_ASSIGN_TAG = 3
    MISSING_KEY = 4
    DUPLICATED_KEY = 5
    SECTION_NOT_FOUND = 6
    KEY_NOT_FOUND = 7
    PARSING_ERROR = 8
    WRITING_FILE_ERROR = 9
    READING_FILE_ERROR = 10
    ALREADY_INITIALIZED = 11


MESSAGES_NUMBER = len(MessageKind)

DEFAULT_MESSAGES: tuple[str, ...] = (
    "Error opening settings file: '{}': '{}'",
    "Missing start section tag '{}' at line '{}' of settings file: '{}'",
    "Missing end section tag '{}' at line '{}' of settings file: '{}'",
    "Missing assign tag '{}' at line '{}' of settings file: '{}'",
    "Missing key at line '{}' of settings file: '{}'",
    "Duplicated key '{}' at line '{}' previously defined at line '{}' of settings file: '{}'",
    "Section '{}' not found",
    "Section '{}' key '{}' not found",
    "Section '{}' key '{}', Parsing error: '{}'",
    "Error writing file: '{}': '{}'",
    "Error reading file: '{}' at line {}: '{}'",
    "Settings already initialized using file: '{}'",
)


@dataclass(frozen=True)
class Diagnostic:
    """A rendered error: its kind, the raw parameters and the final text."""

    kind: MessageKind
    params: tuple[str, ...]
    message: str

    def __str__(self) -> str:
        return self.message


def format_message(template: str, params: Sequence[object]) -> str:
    """Fill the ``{}`` placeholders of *template* from left to right.

    Surplus placeholders are left as literal ``{}``; surplus parameters are
    ignored.  Parameter text is inserted verbatim and never re-scanned.
    """
    parts = template.split(PLACEHOLDER)
    out = [parts[0]]
    for idx, part in enumerate(parts[1:]):
        out.append(str(params[idx]) if idx < len(params) else PLACEHOLDER)
        out.append(part)
    return "".join(out)


def validate_table(messages: Sequence[str]) -> tuple[str, ...]:
    if isinstance(messages, str):
        raise TypeError("message table must be a sequence of templates")
    table = tuple(messages)
    if len(table) != MESSAGES_NUMBER:
        raise ValueError(
            f"message table must contain {MESSAGES_NUMBER} templates, got {len(table)}"
        )
    for template in table:
        if not isinstance(template, str):
            raise TypeError(f"message template must be str, got {type(template).__name__}")
    return table


def diagnostic(
    messages: Sequence[str], kind: MessageKind, *params: object
) -> Diagnostic:
    """Build a :class:`Diagnostic` for *kind* rendered with *messages*."""
    text_params = tuple(str(p) for p in params)
    return Diagnostic(kind, text_params, format_message(messages[kind], text_params))


# ---------------------------------------------------------------------------
# Localized tables
# ---------------------------------------------------------------------------


def kind_names() -> list[str]:
    return [kind.name.lower() for kind in MessageKind]


def load_message_table(path: Path | str) -> tuple[str, ...]:
    """Read a localized message table from a TOML file.

    The file must hold a ``[messages]`` table with one template per
    :class:`MessageKind`, keyed by the lower-case kind name::

        [messages]
        opening_file_error = "Errore apertura file di settings: '{}': '{}'"
        ...

    ``ValueError`` is raised when the table is missing, incomplete or names
    an unknown kind.
    """
    path = Path(path)
    doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    table = doc.get("messages")
    if table is None or not hasattr(table, "items"):
        raise ValueError(f"{path}: missing [messages] table")
    entries = {str(k): str(v) for k, v in table.items()}
    names = kind_names()
    unknown = sorted(set(entries) - set(names))
    if unknown:
        raise ValueError(f"{path}: unknown message kinds: {', '.join(unknown)}")
    missing = [n for n in names if n not in entries]
    if missing:
        raise ValueError(f"{path}: missing message kinds: {', '.join(missing)}")
    return validate_table([entries[n] for n in names])


def dump_message_table(messages: Sequence[str] = DEFAULT_MESSAGES) -> str:
    """Return *messages* as TOML text accepted by :func:`load_message_table`."""
    table = validate_table(messages)
    doc = tomlkit.document()
    section = tomlkit.table()
    for name, template in zip(kind_names(), table):
        section.add(name, template)
    doc.add("messages", section)
    return tomlkit.dumps(doc)
