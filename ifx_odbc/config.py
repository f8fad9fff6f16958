"""Environment-variable-based configuration."""

import os
from pathlib import Path


def get_odbcini() -> str | None:
    """Return the explicit user odbc.ini path from ODBCINI, if set."""
    return os.environ.get("ODBCINI") or None


def get_odbcsysini() -> str | None:
    """Return the system odbc.ini directory from ODBCSYSINI, if set."""
    return os.environ.get("ODBCSYSINI") or None


def get_home() -> Path | None:
    """Return the user's home directory from HOME, if set."""
    home = os.environ.get("HOME")
    return Path(home) if home else None


def get_system_odbcini() -> Path:
    """Return the default system odbc.ini path."""
    return Path("/etc/odbc.ini")


def get_informixdir() -> str | None:
    """Return the Informix installation directory from INFORMIXDIR, if set."""
    return os.environ.get("INFORMIXDIR") or None


def is_debug_enabled() -> bool:
    """Return True if IFX_DEBUG is set to a truthy value."""
    return os.environ.get("IFX_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}
