from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir as _uc

SETTINGS_FILENAME = "settings.ini"

# ---------------------------------------------------------------------------
# User directories
# ---------------------------------------------------------------------------

def _app_name(default: str) -> str:
    return os.getenv("PYSETTINGS_APP_NAME", default)

def user_config_dir(app_name: str = "pysettings") -> Path:
    app = _app_name(app_name)
    return Path(_uc(appname=app)).resolve()

# ---------------------------------------------------------------------------
# Settings file
# ---------------------------------------------------------------------------

def default_settings_file(app_name: str = "pysettings") -> Path:
    """Return the settings file used when none is given explicitly.

    ``PYSETTINGS_FILE`` wins when set; otherwise the file lives in the
    per-user configuration directory of *app_name*.
    """
    env = os.getenv("PYSETTINGS_FILE")
    if env:
        return Path(env).expanduser().resolve()
    return user_config_dir(app_name) / SETTINGS_FILENAME
