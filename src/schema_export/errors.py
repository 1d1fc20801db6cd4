"""
Exception hierarchy for the schema export.

Every failure here is fatal to the run; nothing is retried and no partial
output is cleaned up.
"""


class ExportError(Exception):
    """Base exception for export failures."""

    pass


class PreconditionError(ExportError):
    """Raised when the target directory is missing, not a directory or not empty."""

    pass


class ConfigurationError(ExportError):
    """Raised when required settings are missing or invalid."""

    pass


class UnsupportedCellTypeError(ExportError):
    """Raised when a source value has a runtime type the encoder cannot render."""

    def __init__(self, type_name: str, table_name: str | None = None, column_name: str | None = None):
        self.type_name = type_name
        self.table_name = table_name
        self.column_name = column_name

        location = ""
        if table_name and column_name:
            location = f" in {table_name}.{column_name}"
        elif table_name:
            location = f" in {table_name}"
        super().__init__(f"Unknown column type! {type_name}{location}")
