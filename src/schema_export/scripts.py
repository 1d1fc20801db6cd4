"""
Static parts of the generated scripts.
"""

from datetime import datetime

from .identifiers import escape_mysql_name
from .literals import mysql_string
from .naming import CHECK_SCRIPT, TRUNCATE_SCRIPT

DEFAULT_IMPORT_DIR = "/tmp/import/"

TRUNCATE_MARKER = "SELECT 'TRUNCATE TABLES' AS '';"
CHECK_MARKER = "SELECT 'VALIDITY CHECKS' AS '';"


def source_directive(script_name: str) -> str:
    return f"source {script_name}"


def truncate_statement(table_name: str) -> str:
    return f"TRUNCATE TABLE {escape_mysql_name(table_name)};"


def master_head(
    source_id: str,
    schema: str,
    exported_at: datetime,
    import_dir: str = DEFAULT_IMPORT_DIR,
    generator: str = "schema-export",
) -> str:
    """
    Header of main.sql

    Records where the data came from and switches off foreign key checks
    for the whole import.
    """
    return (
        f"-- this dump file set was generated using {generator}\n"
        f"-- source database: {source_id}\n"
        f"-- schema: {schema}\n"
        f"-- exported: {exported_at:%Y-%m-%d %H:%M:%S}\n"
        "\n"
        f"SET @import_dir={mysql_string(import_dir)};\n"
        "\n"
        "SET foreign_key_checks=0;\n"
        "SET autocommit=1;\n"
        "\n"
    )


def master_body(insert_scripts: list[str]) -> str:
    lines = [source_directive(TRUNCATE_SCRIPT)]
    lines.extend(source_directive(name) for name in insert_scripts)
    lines.append(source_directive(CHECK_SCRIPT))
    return "\n".join(lines) + "\n"


def master_foot() -> str:
    return "\nSET foreign_key_checks=1;\n"


def render_master(
    source_id: str,
    schema: str,
    exported_at: datetime,
    insert_scripts: list[str],
    import_dir: str = DEFAULT_IMPORT_DIR,
    generator: str = "schema-export",
) -> str:
    return (
        master_head(source_id, schema, exported_at, import_dir, generator)
        + master_body(insert_scripts)
        + master_foot()
    )
