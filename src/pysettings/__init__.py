from .adapters import TypeAdapter, adapter_for
from .core import Settings, SettingsValue
from .errors import (
    AlreadyInitializedError,
    DuplicatedKeyError,
    KeyNotFoundError,
    SectionNotFoundError,
    SettingsError,
    SettingsFormatError,
    SettingsIOError,
)
from .lines import GLOBAL_SECTION
from .messages import (
    DEFAULT_MESSAGES,
    MESSAGES_NUMBER,
    Diagnostic,
    MessageKind,
    load_message_table,
)


__all__ = [
    "Settings",
    "SettingsValue",
    "GLOBAL_SECTION",
    "DEFAULT_MESSAGES",
    "MESSAGES_NUMBER",
    "Diagnostic",
    "MessageKind",
    "load_message_table",
    "TypeAdapter",
    "adapter_for",
    "SettingsError",
    "AlreadyInitializedError",
    "SettingsIOError",
    "SettingsFormatError",
    "DuplicatedKeyError",
    "SectionNotFoundError",
    "KeyNotFoundError",
]
