"""
Carrier Base Class

Shared base class for all carriers. A carrier is configuration (class
attributes) plus classmethods that estimate zones and turn raw rate sheet
rows into a RateTable.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from shared.rates import MalformedTableError, RateTable, normalize_zone
from shared.zones import band_zone, zip_distance


Rows = Sequence[Sequence[Any]]


class Carrier(ABC):
    """
    Base class for all carriers.

    Attributes:
        IDENTITY
            name            - Display name and table key (e.g., "USPS")
            match_token     - Lowercase substring that identifies the carrier
                              in free-text carrier names (e.g., "usps")

        ZONES
            zones           - Bounded set of zone keys the rate sheet may use
            zone_bands      - (upper distance bound, zone) pairs, ascending
            far_zone        - Zone beyond the last distance band
            zone_fallbacks  - zone -> zone used when a bracket has no rate

        RATE SHEET
            min_rows        - Fewest raw rows a sheet can have
    """

    # -------------------------------------------------------------------------
    # IDENTITY
    # -------------------------------------------------------------------------
    name: str
    match_token: str

    # -------------------------------------------------------------------------
    # ZONES
    # -------------------------------------------------------------------------
    zones: frozenset[str] = frozenset(str(z) for z in range(1, 10))
    zone_bands: tuple[tuple[int, str], ...] = ()
    far_zone: str = "9"
    zone_fallbacks: dict[str, str] = {}

    # -------------------------------------------------------------------------
    # RATE SHEET
    # -------------------------------------------------------------------------
    min_rows: int = 1

    # -------------------------------------------------------------------------
    # METHODS
    # -------------------------------------------------------------------------

    @classmethod
    def matches(cls, carrier_name: str | None) -> bool:
        """Case-insensitive substring match on a free-text carrier name."""
        return cls.match_token in (carrier_name or "").lower()

    @classmethod
    def estimate_zone(cls, origin_zip: Any, destination_zip: Any) -> str:
        """Zone from ZIP prefix distance. Always returns a zone."""
        return band_zone(zip_distance(origin_zip, destination_zip), cls.zone_bands, cls.far_zone)

    @classmethod
    def zone_key(cls, label: Any) -> str:
        """
        Normalize a zone label from a rate sheet header.

        Raises:
            MalformedTableError: If the label is not one of the carrier's zones
        """
        zone = normalize_zone(label)
        if zone not in cls.zones:
            raise MalformedTableError(cls.name, f"unknown zone label '{label}'")
        return zone

    @classmethod
    def build_table(cls, rows) -> RateTable:
        """RateTable from (weight_lbs, zone_rates) rows with this carrier's fallbacks."""
        return RateTable.from_rows(cls.name, rows, cls.zone_fallbacks)

    @classmethod
    @abstractmethod
    def parse_rate_table(cls, rows: Rows) -> RateTable:
        """
        Parse raw rate sheet rows into a RateTable.

        Override per rate sheet format.

        Raises:
            MalformedTableError: If the sheet cannot be parsed
        """
        raise NotImplementedError(f"{cls.name} does not define a rate sheet format")

    @classmethod
    @abstractmethod
    def load_rate_rows(cls) -> list[list[str]]:
        """Raw rows of the carrier's bundled reference rate sheet."""
        raise NotImplementedError(f"{cls.name} has no reference rate sheet")
