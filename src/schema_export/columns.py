"""
Column metadata of an exported table.
"""

from dataclasses import dataclass

from .checksums import ChecksumKind
from .lobs import LobKind

LOB_TYPES = {
    "BLOB": LobKind.BINARY,
    "CLOB": LobKind.CHARACTER,
    "NCLOB": LobKind.CHARACTER,
}

# Types whose values MySQL's CRC32() reproduces byte for byte
CRC32_TYPES = frozenset({
    "VARCHAR2", "CHAR", "NVARCHAR2", "NCHAR", "NUMBER", "BLOB", "CLOB", "NCLOB",
})


@dataclass(frozen=True)
class Column:
    """
    One result set column, 1-based like the driver's metadata.

    ``type_name`` is the Oracle type name (``VARCHAR2``, ``NUMBER``, ...).
    """

    position: int
    name: str
    type_name: str
    precision: int = 0
    scale: int = 0
    excluded: bool = False

    @property
    def lob_kind(self) -> LobKind | None:
        return LOB_TYPES.get(self.type_name)

    @property
    def is_bit_like(self) -> bool:
        """
        NUMBER(1,0), usually migrated to MySQL BIT(1).

        CRC32() over BIT(1) values gives unusable results in MySQL, so these
        columns are verified with SUM() instead. Only this exact
        precision/scale is special-cased.
        """
        return self.precision == 1 and self.scale == 0

    @property
    def checksum_kind(self) -> ChecksumKind | None:
        if self.excluded:
            return None
        if self.type_name == "NUMBER" and self.is_bit_like:
            return ChecksumKind.SUM
        if self.type_name in CRC32_TYPES:
            return ChecksumKind.CRC32
        return None
