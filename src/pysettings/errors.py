from __future__ import annotations

from .messages import Diagnostic, MessageKind


class SettingsError(Exception):
    """Base class for settings errors.

    The rendered diagnostic is the exception message; the structured form is
    available as :attr:`diagnostic`.
    """

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic

    @property
    def kind(self) -> MessageKind:
        return self.diagnostic.kind


class AlreadyInitializedError(SettingsError):
    """Raised when ``load`` is called on an already loaded instance."""


class SettingsIOError(SettingsError):
    """Raised when the settings file cannot be opened, read or written."""


class SettingsFormatError(SettingsError):
    """Raised when a line of the settings file is malformed."""

    def __init__(self, diagnostic: Diagnostic, line: int) -> None:
        super().__init__(diagnostic)
        self.line = line


class DuplicatedKeyError(SettingsFormatError):
    """Raised when a key appears twice in the same section."""

    def __init__(self, diagnostic: Diagnostic, line: int, previous_line: int) -> None:
        super().__init__(diagnostic, line)
        self.previous_line = previous_line


class SectionNotFoundError(SettingsError):
    pass


class KeyNotFoundError(SettingsError):
    pass
