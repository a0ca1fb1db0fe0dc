from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .adapters import TYPE_REGISTRY, adapter_for
from .errors import (
    AlreadyInitializedError,
    DuplicatedKeyError,
    KeyNotFoundError,
    SectionNotFoundError,
    SettingsError,
    SettingsFormatError,
    SettingsIOError,
)
from .lines import (
    ASSIGN_TAG,
    GLOBAL_SECTION,
    KeyValue,
    Malformed,
    SectionHeader,
    classify_line,
    split_comment,
)
from .messages import DEFAULT_MESSAGES, Diagnostic, MessageKind, diagnostic, validate_table
from .section import KeyValuePair, Section

logger = logging.getLogger(__name__)

T = TypeVar("T")

BOM = "\ufeff"
DUMP_RULE = "=" * 68


@dataclass
class SettingsValue(Generic[T]):
    """Result of :meth:`Settings.get`.

    ``value`` is the parsed value, or the caller's default when
    ``diagnostic`` is set.
    """

    value: T
    diagnostic: Diagnostic | None = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None

    @property
    def error(self) -> str:
        return "" if self.diagnostic is None else self.diagnostic.message


def _os_error_text(exc: BaseException) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        return f"{exc.strerror} (errno {exc.errno})"
    return str(exc)


def _split_ending(raw: bytes) -> tuple[bytes, bytes]:
    body = raw.rstrip(b"\r\n")
    return body, raw[len(body):]


class Settings:
    """An INI-style settings file loaded into memory.

    The file is read once with :meth:`load`; values are read with
    :meth:`get` and changed with :meth:`set`, and :meth:`save` writes the
    changed values back into the original file, leaving every other line
    (comments, blank lines, headers, untouched pairs) exactly as it was.

    The instance is not thread-safe.  Share it between threads only behind
    a lock held for every call.

    Used as a context manager, or when garbage collected, the instance saves
    pending changes via :meth:`close`; failures of that implicit save are
    logged instead of raised.

    *encoding* must encode line breaks, ``=``, ``#`` and brackets as single
    ASCII bytes (UTF-8, Latin-1, cp1252, ...); UTF-16 and UTF-32 are
    rejected with :class:`ValueError`.
    """

    def __init__(
        self,
        messages: Sequence[str] | None = None,
        *,
        encoding: str = "utf-8",
    ) -> None:
        self._messages = validate_table(DEFAULT_MESSAGES if messages is None else messages)
        if "\r\n=#[]".encode(encoding) != b"\r\n=#[]":
            raise ValueError(f"encoding {encoding!r} is not ASCII compatible")
        self.encoding = encoding
        self._path = ""
        self._sections: list[Section] = []

    # ----- state -----

    @property
    def path(self) -> str:
        """Path of the loaded file, ``""`` when nothing is loaded."""
        return self._path

    @property
    def is_loaded(self) -> bool:
        return bool(self._path)

    @property
    def messages(self) -> tuple[str, ...]:
        return self._messages

    def sections(self) -> list[str]:
        return [section.name for section in self._sections]

    def keys(self, section_name: str) -> list[str]:
        section = self._get_section(section_name)
        if section is None:
            raise SectionNotFoundError(
                self._diagnostic(MessageKind.SECTION_NOT_FOUND, section_name)
            )
        return section.keys()

    def _diagnostic(self, kind: MessageKind, *params: object) -> Diagnostic:
        return diagnostic(self._messages, kind, *params)

    def _get_section(self, name: str) -> Section | None:
        for section in self._sections:
            if section.name == name:
                return section
        return None

    # ----- load -----

    def load(self, path: str | os.PathLike[str]) -> None:
        """Load the settings file at *path*.

        Raises :class:`AlreadyInitializedError` if a file is already loaded,
        :class:`SettingsIOError` if the file cannot be opened or read and
        :class:`SettingsFormatError` (or :class:`DuplicatedKeyError`) for the
        first malformed line.  On failure the instance is left empty and
        unloaded, so ``load`` may be retried.
        """
        if self.is_loaded:
            raise AlreadyInitializedError(
                self._diagnostic(MessageKind.ALREADY_INITIALIZED, self._path)
            )
        path_str = os.fspath(path)
        logger.debug("loading settings from %s", path_str)
        try:
            self._load(path_str)
        except SettingsError as exc:
            logger.debug("loading %s failed: %s", path_str, exc)
            self._unload()
            raise
        self._path = path_str
        logger.debug("loaded %d sections from %s", len(self._sections), path_str)

    def _load(self, path: str) -> None:
        try:
            fh = open(path, "rb")
        except OSError as exc:
            raise SettingsIOError(
                self._diagnostic(MessageKind.OPENING_FILE_ERROR, path, _os_error_text(exc))
            ) from exc

        current_section = GLOBAL_SECTION
        with fh:
            line_number = 0
            lines = iter(fh)
            while True:
                line_number += 1
                try:
                    raw = next(lines)
                    text = raw.decode(self.encoding)
                except StopIteration:
                    break
                except (OSError, UnicodeDecodeError) as exc:
                    raise SettingsIOError(
                        self._diagnostic(
                            MessageKind.READING_FILE_ERROR,
                            path,
                            line_number,
                            _os_error_text(exc),
                        )
                    ) from exc
                if line_number == 1:
                    text = text.removeprefix(BOM)

                kind = classify_line(text, line_number, path, self._messages)
                if isinstance(kind, SectionHeader):
                    current_section = kind.name
                elif isinstance(kind, KeyValue):
                    self._add_to_section(current_section, kind.key, kind.value, line_number, path)
                elif isinstance(kind, Malformed):
                    raise SettingsFormatError(kind.diagnostic, line_number)

    def _add_to_section(
        self, section_name: str, key: str, value: str, line: int, path: str
    ) -> None:
        section = self._get_section(section_name)
        if section is None:
            section = Section(section_name)
            self._sections.append(section)
        previous = section.add(key, value, line)
        if previous is not None:
            raise DuplicatedKeyError(
                self._diagnostic(MessageKind.DUPLICATED_KEY, key, line, previous, path),
                line,
                previous,
            )

    def _unload(self) -> None:
        for section in self._sections:
            section.clear()
        self._sections.clear()

    # ----- save -----

    def save(self) -> None:
        """Write changed values back to the loaded file.

        The file is read again from disk and only the lines of pairs changed
        with :meth:`set` are rewritten, as ``key = value`` followed by the
        original trailing comment, if any.  All other bytes are kept.  The
        file is truncated and rewritten in place, so a crash while writing
        may leave it incomplete.  Does nothing when no file is loaded.
        """
        if not self.is_loaded:
            return
        raw_lines = self._read_raw_lines()
        patched = 0
        for section in self._sections:
            for entry in section:
                if not entry.modified:
                    continue
                index = entry.line - 1
                if index >= len(raw_lines):
                    logger.warning(
                        "%s: line %d of key %r is past the end of the file, skipped",
                        self._path,
                        entry.line,
                        entry.key,
                    )
                    continue
                raw_lines[index] = self._patch_line(raw_lines[index], entry)
                patched += 1
        self._write_raw_lines(raw_lines)
        for section in self._sections:
            for entry in section:
                entry.modified = False
        logger.debug("saved %s (%d lines patched)", self._path, patched)

    def _read_raw_lines(self) -> list[bytes]:
        try:
            fh = open(self._path, "rb")
        except OSError as exc:
            raise SettingsIOError(
                self._diagnostic(
                    MessageKind.OPENING_FILE_ERROR, self._path, _os_error_text(exc)
                )
            ) from exc
        raw_lines: list[bytes] = []
        with fh:
            lines = iter(fh)
            while True:
                try:
                    raw_lines.append(next(lines))
                except StopIteration:
                    break
                except OSError as exc:
                    raise SettingsIOError(
                        self._diagnostic(
                            MessageKind.READING_FILE_ERROR,
                            self._path,
                            len(raw_lines) + 1,
                            _os_error_text(exc),
                        )
                    ) from exc
        return raw_lines

    def _patch_line(self, raw: bytes, entry: KeyValuePair) -> bytes:
        body, ending = _split_ending(raw)
        try:
            text = body.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise SettingsIOError(
                self._diagnostic(
                    MessageKind.READING_FILE_ERROR,
                    self._path,
                    entry.line,
                    _os_error_text(exc),
                )
            ) from exc
        bom = BOM if entry.line == 1 and text.startswith(BOM) else ""
        _, comment = split_comment(text)
        new_text = f"{entry.key} {ASSIGN_TAG} {entry.value}"
        if comment:
            new_text = f"{new_text} {comment}"
        try:
            return (bom + new_text).encode(self.encoding) + ending
        except UnicodeEncodeError as exc:
            raise SettingsIOError(
                self._diagnostic(
                    MessageKind.WRITING_FILE_ERROR, self._path, _os_error_text(exc)
                )
            ) from exc

    def _write_raw_lines(self, raw_lines: list[bytes]) -> None:
        try:
            fh = open(self._path, "wb")
        except OSError as exc:
            raise SettingsIOError(
                self._diagnostic(
                    MessageKind.OPENING_FILE_ERROR, self._path, _os_error_text(exc)
                )
            ) from exc
        with fh:
            for raw in raw_lines:
                try:
                    fh.write(raw)
                    fh.flush()
                except OSError as exc:
                    raise SettingsIOError(
                        self._diagnostic(
                            MessageKind.WRITING_FILE_ERROR,
                            self._path,
                            _os_error_text(exc),
                        )
                    ) from exc

    # ----- typed access -----

    def get(
        self, section_name: str, key: str, default: T, kind: Any = None
    ) -> SettingsValue[T]:
        """Return the value of *key* in *section_name* parsed as *kind*.

        *kind* defaults to the type of *default*; see
        :func:`pysettings.adapters.adapter_for` for accepted values.  Missing
        sections, missing keys and unparsable values never raise: the
        returned :class:`SettingsValue` holds *default* and a diagnostic.

        Example::

            result = settings.get("GLOBAL", "bool_value", False)
            if not result.ok:
                print(result.error)
        """
        adapter = adapter_for(type(default) if kind is None else kind)
        section = self._get_section(section_name)
        if section is None:
            return SettingsValue(
                default, self._diagnostic(MessageKind.SECTION_NOT_FOUND, section_name)
            )
        raw = section.get(key)
        if raw is None:
            return SettingsValue(
                default, self._diagnostic(MessageKind.KEY_NOT_FOUND, section_name, key)
            )
        try:
            value = adapter.parse(raw)
        except ValueError as exc:
            return SettingsValue(
                default,
                self._diagnostic(MessageKind.PARSING_ERROR, section_name, key, exc),
            )
        return SettingsValue(value)

    def set(self, section_name: str, key: str, value: Any, kind: Any = None) -> None:
        """Replace the value of an existing *key* in *section_name*.

        Sections and keys are never created: :class:`SectionNotFoundError`
        or :class:`KeyNotFoundError` is raised instead and nothing changes.
        Values of types without a registered adapter are stored as
        ``str(value)``.
        """
        section = self._get_section(section_name)
        if section is None:
            raise SectionNotFoundError(
                self._diagnostic(MessageKind.SECTION_NOT_FOUND, section_name)
            )
        if key not in section:
            raise KeyNotFoundError(
                self._diagnostic(MessageKind.KEY_NOT_FOUND, section_name, key)
            )
        if kind is not None:
            text = adapter_for(kind).serialize(value)
        elif type(value) in TYPE_REGISTRY:
            text = TYPE_REGISTRY[type(value)].serialize(value)
        else:
            text = str(value)
        if "\n" in text or "\r" in text:
            raise ValueError(f"value for {section_name}.{key} must be a single line")
        section.set(key, text)

    # ----- lifecycle -----

    @property
    def has_changes(self) -> bool:
        """``True`` when a value was set since the last load or save."""
        return any(entry.modified for section in self._sections for entry in section)

    def close(self) -> None:
        """Save pending changes, logging instead of raising any failure.

        Safe to call repeatedly: only values set since the last save are
        written, and nothing happens when there are none.
        """
        if not self.has_changes:
            return
        try:
            self.save()
        except SettingsError as exc:
            logger.error("'%s': automatic save failed: %s", self._path, exc)

    def __enter__(self) -> Settings:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_path", ""):
            self.close()

    # ----- dunder helpers -----

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Settings):
            return NotImplemented
        return self._sections == other._sections

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Settings(path={self._path!r}, sections={self.sections()!r})"

    def __str__(self) -> str:
        body = "".join(str(section) for section in self._sections)
        return f"Settings path: {self._path}\n{body}{DUMP_RULE}\n"
