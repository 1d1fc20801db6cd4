"""
Export settings.

Each setting is taken from the command line, then the environment, then the
properties file (``export.properties`` in the working directory unless
another file is given) and finally its default.

Properties file example::

    url=dbhost:1521/ORCLPDB1
    user=APP
    password=secret
    target_path=/var/tmp/dump
    zip=true
    exclude_tables=AUDIT_LOG,TMP_IMPORT
    exclude_columns.CUSTOMERS=PASSWORD_HASH,NOTES
"""

import configparser
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError
from .lobs import DEFAULT_BYTE_CHUNK_SIZE
from .scripts import DEFAULT_IMPORT_DIR

logger = logging.getLogger(__name__)

DEFAULT_PROPERTIES_FILE = "export.properties"
EXCLUDE_COLUMNS_PREFIX = "exclude_columns."

_PROPERTIES_SECTION = "export"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def parse_bool(value: str | bool, name: str) -> bool:
    if isinstance(value, bool):
        return value
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def parse_positive_int(value: str | int, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}") from None
    if number < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {number}")
    return number


def split_names(value: str | None) -> list[str]:
    """Comma-separated names, blanks dropped."""
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def parse_column_exclusion(value: str) -> tuple[str, list[str]]:
    """
    Parse ``TABLE:col1,col2``

    Example:
        >>> parse_column_exclusion("CUSTOMERS:NOTES,PASSWORD_HASH")
        ('CUSTOMERS', ['NOTES', 'PASSWORD_HASH'])
    """
    table, sep, columns = value.partition(":")
    if not sep or not table.strip():
        raise ConfigurationError(f"Invalid column exclusion {value!r}, expected TABLE:col1,col2")
    return table.strip(), split_names(columns)


def resolve_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown time zone {name!r}") from e


def read_properties(path: str | Path) -> dict[str, str]:
    """
    Read a ``key=value`` properties file

    Lines starting with ``#`` or ``!`` are comments. Keys keep their case.
    """
    parser = configparser.ConfigParser(
        delimiters=("=", ":"),
        comment_prefixes=("#", "!"),
        interpolation=None,
    )
    parser.optionxform = str
    text = Path(path).read_text(encoding="utf-8")
    try:
        parser.read_string(f"[{_PROPERTIES_SECTION}]\n{text}", source=str(path))
    except configparser.Error as e:
        raise ConfigurationError(f"Cannot parse {path}: {e}") from e
    return dict(parser[_PROPERTIES_SECTION])


@dataclass
class ExportSettings:
    """Resolved settings of one export run."""

    dsn: str
    user: str
    password: str = field(repr=False)
    target_path: str
    zip_output: bool = False
    import_dir: str = DEFAULT_IMPORT_DIR
    exclude_tables: frozenset[str] = frozenset()
    exclude_columns: dict[str, frozenset[str]] = field(default_factory=dict)
    timezone: str | None = None
    lob_chunk_size: int = DEFAULT_BYTE_CHUNK_SIZE
    parallel_workers: int = 1

    def __post_init__(self):
        if self.timezone is not None:
            resolve_zone(self.timezone)

    @property
    def zone(self) -> tzinfo | None:
        return resolve_zone(self.timezone) if self.timezone is not None else None

    @property
    def char_chunk_size(self) -> int:
        return max(1, self.lob_chunk_size // 2)

    def safe_dict(self) -> dict[str, Any]:
        """Settings for logging, password masked."""
        return {
            "dsn": self.dsn,
            "user": self.user,
            "password": "***",
            "target_path": self.target_path,
            "zip_output": self.zip_output,
            "import_dir": self.import_dir,
            "exclude_tables": sorted(self.exclude_tables),
            "exclude_columns": {t: sorted(c) for t, c in self.exclude_columns.items()},
            "timezone": self.timezone,
            "lob_chunk_size": self.lob_chunk_size,
            "parallel_workers": self.parallel_workers,
        }


def load_settings(
    args: Any = None,
    environ: Mapping[str, str] | None = None,
    properties_path: str | Path | None = None,
) -> ExportSettings:
    """
    Resolve the export settings

    Args:
        args: Parsed command-line arguments (attributes may be missing or None)
        environ: Environment variables (default: os.environ)
        properties_path: Properties file; the default file is optional, an
            explicitly given one must exist

    Raises:
        ConfigurationError: A required setting is missing or a value is invalid
    """
    environ = os.environ if environ is None else environ

    if properties_path is not None:
        if not Path(properties_path).is_file():
            raise ConfigurationError(f"Properties file {properties_path} not found")
        properties = read_properties(properties_path)
    elif Path(DEFAULT_PROPERTIES_FILE).is_file():
        properties_path = DEFAULT_PROPERTIES_FILE
        properties = read_properties(DEFAULT_PROPERTIES_FILE)
    else:
        properties = {}
    if properties:
        logger.debug(f"Loaded {len(properties)} properties from {properties_path}")

    def pick(arg_name: str, env_name: str | None, key: str, default=None):
        value = getattr(args, arg_name, None) if args is not None else None
        if value is not None:
            return value
        if env_name and environ.get(env_name) is not None:
            return environ[env_name]
        return properties.get(key, default)

    missing = []
    dsn = pick("dsn", "ORACLE_DSN", "url")
    user = pick("user", "ORACLE_USER", "user")
    password = pick("password", "ORACLE_PASSWORD", "password")
    target_path = pick("target_path", "EXPORT_TARGET_PATH", "target_path")
    for name, value in (("dsn", dsn), ("user", user), ("password", password), ("target_path", target_path)):
        if not value:
            missing.append(name)
    if missing:
        raise ConfigurationError(f"Missing required setting(s): {', '.join(missing)}")

    exclude_columns: dict[str, set[str]] = {}
    for key, value in properties.items():
        if key.startswith(EXCLUDE_COLUMNS_PREFIX):
            table = key[len(EXCLUDE_COLUMNS_PREFIX):]
            exclude_columns.setdefault(table.upper(), set()).update(split_names(value))
    for entry in getattr(args, "exclude_columns", None) or []:
        table, columns = parse_column_exclusion(entry)
        exclude_columns.setdefault(table.upper(), set()).update(columns)

    settings = ExportSettings(
        dsn=dsn,
        user=user,
        password=password,
        target_path=target_path,
        zip_output=parse_bool(pick("zip", "EXPORT_ZIP", "zip", False), "zip"),
        import_dir=pick("import_dir", "EXPORT_IMPORT_DIR", "import_dir", DEFAULT_IMPORT_DIR),
        exclude_tables=frozenset(
            split_names(pick("exclude_tables", "EXPORT_EXCLUDE_TABLES", "exclude_tables"))
        ),
        exclude_columns={table: frozenset(cols) for table, cols in exclude_columns.items()},
        timezone=pick("timezone", "EXPORT_TIMEZONE", "timezone") or None,
        lob_chunk_size=parse_positive_int(
            pick("lob_chunk_size", None, "lob_chunk_size", DEFAULT_BYTE_CHUNK_SIZE), "lob_chunk_size"
        ),
        parallel_workers=parse_positive_int(
            pick("parallel_workers", None, "parallel_workers", 1), "parallel_workers"
        ),
    )
    logger.debug(f"Export settings: {settings.safe_dict()}")
    return settings
