"""Connection strings and odbc.ini data-source resolution.

Connection strings are ``KEY=VALUE`` pairs separated by semicolons. Keys
are case-insensitive; a value may be wrapped in braces (``PWD={a;b}``) to
carry semicolons, with ``}}`` standing for a literal ``}``.

odbc.ini files are searched in this order, and the first file holding a
section named after the DSN wins:

1. ``$ODBCINI``
2. ``~/.odbc.ini``
3. ``$ODBCSYSINI/odbc.ini``
4. ``/etc/odbc.ini``
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ifx_odbc import config as env
from ifx_odbc.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from ifx_odbc.core.connection import ConnectionConfig

logger = logging.getLogger(__name__)

# odbc.ini key (lower-case) -> connection-string key
_INI_KEYS: dict[str, str] = {
    "driver": "DRIVER",
    "database": "DATABASE",
    "server": "SERVER",
    "servername": "SERVER",
    "host": "HOST",
    "service": "SERVICE",
    "port": "SERVICE",
    "protocol": "PROTOCOL",
    "uid": "UID",
    "logonid": "UID",
    "pwd": "PWD",
    "password": "PWD",
}

# ConnectionConfig field -> connection-string key, in output order
CONFIG_KEYS: dict[str, str] = {
    "dsn": "DSN",
    "database": "DATABASE",
    "host": "HOST",
    "server": "SERVER",
    "service": "SERVICE",
    "protocol": "PROTOCOL",
    "user": "UID",
    "password": "PWD",
}

_NON_DSN_SECTIONS = {"ODBC", "ODBC Data Sources"}


# ---------------------------------------------------------------------------
# Connection strings
# ---------------------------------------------------------------------------


def parse_connection_string(conn_str: str) -> dict[str, str]:
    """Parse ``KEY=VALUE;KEY={VALUE};...`` into a dict with upper-case keys.

    Raises:
        ConfigurationError: On a segment without ``=``, an empty key, or an
            unterminated brace-quoted value.
    """
    result: dict[str, str] = {}
    i = 0
    n = len(conn_str)

    while i < n:
        semi = conn_str.find(";", i)
        eq = conn_str.find("=", i)
        if eq == -1 or (semi != -1 and semi < eq):
            end = n if semi == -1 else semi
            if conn_str[i:end].strip():
                raise ConfigurationError(
                    f"Malformed connection string segment: {conn_str[i:end].strip()!r}"
                )
            i = end + 1
            continue

        key = conn_str[i:eq].strip().upper()
        if not key:
            raise ConfigurationError(f"Empty key in connection string: {conn_str!r}")

        j = eq + 1
        while j < n and conn_str[j] in " \t":
            j += 1
        if j < n and conn_str[j] == "{":
            value, j = _read_braced(conn_str, j, key)
            while j < n and conn_str[j] in " \t":
                j += 1
            if j < n and conn_str[j] != ";":
                raise ConfigurationError(f"Unexpected text after {{...}} value for {key}")
        else:
            end = conn_str.find(";", j)
            if end == -1:
                end = n
            value = conn_str[j:end].strip()
            j = end

        result[key] = value
        i = j + 1

    return result


def _read_braced(conn_str: str, start: int, key: str) -> tuple[str, int]:
    """Read a ``{...}`` value starting at *start*; return (value, index after)."""
    chars: list[str] = []
    j = start + 1
    n = len(conn_str)
    while j < n:
        ch = conn_str[j]
        if ch == "}":
            if j + 1 < n and conn_str[j + 1] == "}":
                chars.append("}")
                j += 2
                continue
            return "".join(chars), j + 1
        chars.append(ch)
        j += 1
    raise ConfigurationError(f"Unterminated {{...}} value for {key}")


def _format_value(value: str) -> str:
    if any(ch in value for ch in ";{}") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


def build_connection_string(config: ConnectionConfig) -> str:
    """Build the ODBC connection string for *config*.

    Known keys come first in a fixed order (DSN, DATABASE, HOST, SERVER,
    SERVICE, PROTOCOL, UID, PWD), followed by any extra keys.
    """
    parts: list[str] = []
    for field, key in CONFIG_KEYS.items():
        value = getattr(config, field)
        if value:
            parts.append(f"{key}={_format_value(str(value))};")
    for key, value in config.extra.items():
        parts.append(f"{key.upper()}={_format_value(str(value))};")
    return "".join(parts)


# ---------------------------------------------------------------------------
# odbc.ini
# ---------------------------------------------------------------------------


def _user_ini_files() -> list[Path]:
    paths: list[Path] = []
    odbcini = env.get_odbcini()
    if odbcini:
        paths.append(Path(odbcini))
    home = env.get_home()
    if home is not None:
        paths.append(home / ".odbc.ini")
    return paths


def _system_ini_files() -> list[Path]:
    paths: list[Path] = []
    odbcsysini = env.get_odbcsysini()
    if odbcsysini:
        paths.append(Path(odbcsysini) / "odbc.ini")
    paths.append(env.get_system_odbcini())
    return paths


def odbcini_search_path() -> list[Path]:
    """odbc.ini candidates in search order (existing or not)."""
    return [*_user_ini_files(), *_system_ini_files()]


def _load_ini(path: Path) -> configparser.ConfigParser | None:
    if not path.is_file():
        return None
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, OSError, UnicodeDecodeError):
        logger.warning("Skipping unreadable odbc.ini %s", path, exc_info=True)
        return None
    return parser


def read_dsn(dsn: str) -> dict[str, str] | None:
    """Return the odbc.ini settings for *dsn* from the first file defining it.

    Keys are normalized to connection-string names (``servername`` ->
    ``SERVER``, ``logonid`` -> ``UID`` ...); unknown keys are dropped.
    Returns None if no file has a ``[dsn]`` section.
    """
    for path in odbcini_search_path():
        parser = _load_ini(path)
        if parser is None or not parser.has_section(dsn):
            continue
        logger.debug("DSN %s found in %s", dsn, path)
        entry: dict[str, str] = {}
        for key, value in parser.items(dsn):
            canonical = _INI_KEYS.get(key.lower())
            if canonical is not None and value:
                entry[canonical] = value
        return entry
    return None


def resolve_config(config: ConnectionConfig) -> ConnectionConfig:
    """Fill connection details missing from *config* from its DSN section.

    Values already present on *config* always win.
    """
    if not config.dsn:
        return config
    entry = read_dsn(config.dsn)
    if not entry:
        return config
    updates = {
        field: entry[key]
        for field, key in CONFIG_KEYS.items()
        if field != "dsn" and not getattr(config, field) and key in entry
    }
    return config.model_copy(update=updates)


def datasources(mode: str | None = None) -> list[str]:
    """List DSN names defined in the user and/or system odbc.ini files.

    Args:
        mode: ``None`` for both, ``"user"`` or ``"system"`` for one side.
    """
    normalized = mode.lstrip("-").lower() if mode else None
    if normalized is None:
        files = odbcini_search_path()
    elif normalized == "user":
        files = _user_ini_files()
    elif normalized == "system":
        files = _system_ini_files()
    else:
        raise ConfigurationError(f"Unknown datasource mode {mode!r}: must be user or system")

    names: set[str] = set()
    for path in files:
        parser = _load_ini(path)
        if parser is not None:
            names.update(s for s in parser.sections() if s not in _NON_DSN_SECTIONS)
    return sorted(names)


def drivers() -> dict[str, str]:
    """Installed ODBC drivers known to this package."""
    found: dict[str, str] = {}
    informixdir = env.get_informixdir()
    if informixdir and (Path(informixdir) / "lib" / "cli" / "libifcli.so").exists():
        found["Informix CLI"] = "Informix ODBC Driver via CLI"
    return found
