from __future__ import annotations

from pathlib import Path

import pytest

SETTINGS_INI = """\
# Settings used by the typed get/set tests
bool_value = true
i32_value = -100
u32_value = 100
i64_value = -200   # signed 64 bit
u64_value = 200
f32_value = -400.32
f64_value = 400.64
string_value = The quick brown fox jump over the lazy dog

[LOG]
enabled = true     # logging switch
path = /var/log/app.log
"""

# '[' missing at line 7
MISSING_START_SECTION_TAG_INI = """\
[GENERAL]
name = demo
# comment

[LOG]
enabled = true
SECOND]
level = 3
"""

# ']' missing at line 11
MISSING_END_SECTION_TAG_INI = """\
# header comment
[GENERAL]
name = demo

[LOG]
enabled = true
level = 3

# another section follows

[NETWORK
port = 8080
"""

# '=' missing at line 3
MISSING_ASSIGN_TAG_INI = """\
[GENERAL]
name = demo
enabled true
"""

# key missing at line 5
MISSING_KEY_INI = """\
[GENERAL]
name = demo

[LOG]
 = true
"""

# key1 at line 2 repeated at line 5
DUPLICATED_KEY_INI = """\
[SECTION_1]
key1 = a
key2 = b
# key1 again
key1 = c
"""

KEY_VALUE_TO_GLOBAL_INI = """\
key1 = true
key2 = 123
[]
key3 = 234.35
[SECTION_1]
key1 = def
[GLOBAL]
key4 = abc
"""

SET_GET_ERRORS_INI = """\
[GENERAL]
enabled = ciao
integer_value = a123
float_value = 123a.35

[LOG]
enabled = true
"""

NO_SECTION_NAME_INI = """\
# an empty header names the GLOBAL section
[]
title = Test empty section name
"""


SAMPLES = {
    "settings": SETTINGS_INI,
    "missing_start_section_tag": MISSING_START_SECTION_TAG_INI,
    "missing_end_section_tag": MISSING_END_SECTION_TAG_INI,
    "missing_assign_tag": MISSING_ASSIGN_TAG_INI,
    "missing_key": MISSING_KEY_INI,
    "duplicated_key": DUPLICATED_KEY_INI,
    "key_value_to_global": KEY_VALUE_TO_GLOBAL_INI,
    "set_get_errors": SET_GET_ERRORS_INI,
    "no_section_name": NO_SECTION_NAME_INI,
}


@pytest.fixture
def write_ini(tmp_path: Path):
    """Return a helper writing *text* to ``tmp_path / name``."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample(write_ini):
    """Return a helper writing the named sample file, e.g. ``sample("missing_key")``."""

    def _sample(name: str) -> Path:
        return write_ini(f"{name}.ini", SAMPLES[name])

    return _sample


@pytest.fixture
def settings_file(sample) -> Path:
    return sample("settings")
