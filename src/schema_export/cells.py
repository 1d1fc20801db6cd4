"""
Runtime classification of source values.

Result set values arrive dynamically typed. They are mapped onto a closed
set of cell kinds once, so the encoder can dispatch over a fixed set of
cases and reject everything else.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Any

from .lobs import BinaryLobStream, CharacterLobStream

logger = logging.getLogger(__name__)


class CellKind(Enum):
    NULL = "null"
    DECIMAL = "decimal"
    BINARY = "binary"
    CHARACTER = "character"
    TEXT = "text"
    INSTANT = "instant"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Instant:
    """
    A point in time as read from the source.

    The driver delivers DATE and TIMESTAMP values as naive datetimes (wall
    clock of the export time zone) and TIMESTAMP WITH TIME ZONE values as
    aware datetimes. Naive values keep their wall clock together with the
    zone they were read in, so rendering them in that zone never shifts them.
    Both shapes leave this type through to_zone() only.
    """

    value: datetime
    zone: tzinfo | None = None

    @classmethod
    def from_naive(cls, value: datetime, zone: tzinfo | None = None) -> "Instant":
        """Wall-clock value read in ``zone`` (system local if None)."""
        if value.tzinfo is not None:
            raise ValueError("from_naive() expects a naive datetime")
        return cls(value, zone)

    @classmethod
    def from_aware(cls, value: datetime) -> "Instant":
        if value.tzinfo is None:
            raise ValueError("from_aware() expects a timezone-aware datetime")
        return cls(value)

    @classmethod
    def from_datetime(cls, value: datetime, zone: tzinfo | None = None) -> "Instant":
        if value.tzinfo is None:
            return cls.from_naive(value, zone)
        return cls.from_aware(value)

    @property
    def is_naive(self) -> bool:
        return self.value.tzinfo is None

    @property
    def utc(self) -> datetime:
        """
        This instant in UTC

        Raises:
            OverflowError, ValueError: The shift leaves years 1 to 9999
        """
        if self.is_naive:
            localized = self.value.replace(tzinfo=self.zone) if self.zone is not None else self.value.astimezone()
            return localized.astimezone(UTC)
        return self.value.astimezone(UTC)

    def to_zone(self, zone: tzinfo | None = None) -> datetime:
        """
        Wall-clock time of this instant in ``zone`` (system local if None)

        A naive value asked for in the zone it was read in comes back
        unchanged. Values whose shift would leave the datetime range, such as
        the 0001-01-01 and 9999-12-31 sentinels, keep their source wall clock.
        """
        if self.is_naive and zone == self.zone:
            return self.value
        try:
            return self.utc.astimezone(zone)
        except (OverflowError, ValueError):
            logger.debug(f"Keeping wall clock of {self.value.isoformat()}: shift out of range")
            return self.value


@dataclass(frozen=True)
class Cell:
    kind: CellKind
    value: Any = None

    @property
    def type_name(self) -> str:
        """Qualified runtime type name of the original value."""
        value_type = self.value.__class__
        return f"{value_type.__module__}.{value_type.__qualname__}"


def classify_cell(value: Any, zone: tzinfo | None = None) -> Cell:
    """
    Map a source value onto its cell kind

    Instants are normalized here; every other value is carried unchanged.
    Values of any other runtime type become UNRECOGNIZED cells, which the
    encoder rejects.
    """
    if value is None:
        return Cell(CellKind.NULL)
    if isinstance(value, Decimal):
        return Cell(CellKind.DECIMAL, value)
    if isinstance(value, BinaryLobStream):
        return Cell(CellKind.BINARY, value)
    if isinstance(value, CharacterLobStream):
        return Cell(CellKind.CHARACTER, value)
    if isinstance(value, str):
        return Cell(CellKind.TEXT, value)
    if isinstance(value, datetime):
        return Cell(CellKind.INSTANT, Instant.from_datetime(value, zone))
    return Cell(CellKind.UNRECOGNIZED, value)
