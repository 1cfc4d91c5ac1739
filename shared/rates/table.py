"""
Rate Table

Normalized, immutable rate table for one carrier and the weight/zone lookup
against it.

STRUCTURE
---------
A RateTable is an ascending sequence of WeightBracket rows. Each bracket
covers every weight up to and including max_weight_lbs and maps zone keys
("1".."9") to rates. Brackets are strictly ascending, never share a weight,
and a loaded table is never empty.

LOOKUP POLICY
-------------
    1. Bracket: smallest max_weight_lbs >= weight. Heavier than every
       bracket (or no usable weight) -> heaviest bracket.
    2. Zone: direct rate for the zone key. If the carrier declares a zone
       fallback (USPS "9" -> "8") and the direct rate is absent or zero,
       the fallback zone's rate in the same bracket is used.
    3. Nothing found -> 0.0. No table at all -> 0.0.

Lookups never raise. A zero rate from a blank source cell looks the same as
a real zero rate.
"""

import math
from bisect import bisect_left
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

import polars as pl

from .errors import MalformedTableError
from .parsing import normalize_zone


# Long format used for joins in the batch calculator
RATE_FRAME_SCHEMA = {
    "carrier": pl.Utf8,
    "max_weight_lbs": pl.Float64,
    "zone": pl.Utf8,
    "rate": pl.Float64,
}


# =============================================================================
# STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class WeightBracket:
    """One weight row of a rate table."""

    max_weight_lbs: float
    zone_rates: Mapping[str, float]

    def __post_init__(self):
        object.__setattr__(self, "zone_rates", MappingProxyType(dict(self.zone_rates)))


@dataclass(frozen=True)
class RateTable:
    """
    Rate table for one carrier.

    Attributes:
        carrier         - Carrier name the table belongs to (e.g. "USPS")
        brackets        - WeightBracket rows, strictly ascending by weight
        zone_fallbacks  - zone -> zone used when a bracket has no rate for it
    """

    carrier: str
    brackets: tuple[WeightBracket, ...]
    zone_fallbacks: Mapping[str, str] = field(default_factory=dict)
    _weights: tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        brackets = tuple(self.brackets)
        if not brackets:
            raise MalformedTableError(self.carrier, "no weight brackets")

        weights = tuple(b.max_weight_lbs for b in brackets)
        for lighter, heavier in zip(weights, weights[1:]):
            if not lighter < heavier:
                raise MalformedTableError(
                    self.carrier,
                    f"weight brackets must be strictly ascending, got {lighter} before {heavier}"
                )

        object.__setattr__(self, "brackets", brackets)
        object.__setattr__(self, "zone_fallbacks", MappingProxyType(dict(self.zone_fallbacks)))
        object.__setattr__(self, "_weights", weights)

    @classmethod
    def from_rows(
        cls,
        carrier: str,
        rows: Iterable[tuple[float, Mapping[str, float]]],
        zone_fallbacks: Mapping[str, str] | None = None,
    ) -> "RateTable":
        """
        Build a table from (weight_lbs, zone_rates) rows in source order.

        Rows are sorted by weight. When two rows resolve to the same weight
        (15.999 oz and 1 lb both round to 1.0) the first one wins.
        """
        by_weight: dict[float, WeightBracket] = {}
        for weight_lbs, zone_rates in rows:
            if weight_lbs not in by_weight:
                by_weight[weight_lbs] = WeightBracket(weight_lbs, zone_rates)

        return cls(
            carrier=carrier,
            brackets=tuple(by_weight[w] for w in sorted(by_weight)),
            zone_fallbacks=zone_fallbacks or {},
        )

    @property
    def max_weight_lbs(self) -> float:
        return self._weights[-1]

    @property
    def zones(self) -> frozenset[str]:
        """Every zone key present in at least one bracket."""
        return frozenset(z for b in self.brackets for z in b.zone_rates)

    def select_bracket(self, weight_lbs: float | None) -> WeightBracket:
        """Closest bracket at or above the weight, heaviest bracket otherwise."""
        if weight_lbs is None or math.isnan(weight_lbs):
            return self.brackets[-1]

        idx = bisect_left(self._weights, weight_lbs)
        if idx >= len(self.brackets):
            return self.brackets[-1]
        return self.brackets[idx]

    def to_frame(self) -> pl.DataFrame:
        """
        Table in long format, one row per bracket and zone.

        Returns:
            DataFrame with columns: carrier, max_weight_lbs, zone, rate
        """
        return pl.DataFrame(
            [
                {
                    "carrier": self.carrier,
                    "max_weight_lbs": bracket.max_weight_lbs,
                    "zone": zone,
                    "rate": rate,
                }
                for bracket in self.brackets
                for zone, rate in bracket.zone_rates.items()
            ],
            schema=RATE_FRAME_SCHEMA,
        )


# =============================================================================
# LOOKUP
# =============================================================================

def lookup_rate(table: RateTable | None, weight_lbs: float | None, zone: str | None) -> float:
    """
    Negotiated rate for a weight and zone. Never raises.

    Args:
        table: Carrier rate table, or None if the carrier failed to load
        weight_lbs: Package weight in pounds
        zone: Zone key ("4", "Zone 4", or a raw token from a zone service)

    Returns:
        Rate from the selected bracket, 0.0 when there is none
    """
    if table is None:
        return 0.0

    bracket = table.select_bracket(weight_lbs)
    zone_key = normalize_zone(zone)

    rate = bracket.zone_rates.get(zone_key)
    fallback_zone = table.zone_fallbacks.get(zone_key)
    if fallback_zone is not None and not rate:
        rate = bracket.zone_rates.get(fallback_zone)

    return 0.0 if rate is None else rate


def rate_frame(tables: Mapping[str, RateTable]) -> pl.DataFrame:
    """
    All tables stacked in long format (empty frame with schema if none).

    The carrier column holds the mapping key, so frames join on the same
    names the tables are looked up by.
    """
    frames = [
        table.to_frame().with_columns(pl.lit(name, dtype=pl.Utf8).alias("carrier"))
        for name, table in tables.items()
    ]
    if not frames:
        return pl.DataFrame(schema=RATE_FRAME_SCHEMA)
    return pl.concat(frames)


__all__ = [
    "RATE_FRAME_SCHEMA",
    "WeightBracket",
    "RateTable",
    "lookup_rate",
    "rate_frame",
]
