"""
Carriers Package

Exports every carrier and the three entry points used by the savings
calculator: zone estimation, rate table loading, and carrier matching.

Carrier Matching:
    Carrier names come from free text ("FedEx Home Delivery", "usps ground").
    A name matches the first carrier in ALL whose match_token is a
    case-insensitive substring. Order matters: "usps" contains "ups", so
    USPS is checked before UPS.

Usage:
    from carriers import estimate_zone, load_rate_tables
"""

from dataclasses import dataclass
from typing import Mapping

import polars as pl

from shared.carrier import Carrier, Rows
from shared.logger import get_logger
from shared.rates import MalformedTableError, RateTable
from .fedex import FedEx
from .usps import USPS
from .ups import UPS


logger = get_logger(__name__)


# All carriers in matching order
ALL: list[type[Carrier]] = [FedEx, USPS, UPS]

# Bands used for zone estimation when the carrier name is not recognized
ESTIMATION_DEFAULT: type[Carrier] = USPS


# =============================================================================
# MATCHING
# =============================================================================

def match_carrier(carrier_name: str | None) -> type[Carrier] | None:
    """First carrier whose token appears in the name, None if none does."""
    for carrier in ALL:
        if carrier.matches(carrier_name):
            return carrier
    return None


def get_carrier(name: str) -> type[Carrier] | None:
    """Carrier by exact name ("USPS", "FedEx", "UPS")."""
    return next((c for c in ALL if c.name == name), None)


# =============================================================================
# ZONES
# =============================================================================

def estimate_zone(carrier_name: str | None, origin_zip, destination_zip) -> str:
    """
    Estimate the zone between two ZIP codes.

    Unrecognized carrier names use USPS bands. Never raises.

    Args:
        carrier_name: Free-text carrier name
        origin_zip: Origin ZIP (5-digit, or longer)
        destination_zip: Destination ZIP

    Returns:
        Zone key ("2".."9")
    """
    carrier = match_carrier(carrier_name) or ESTIMATION_DEFAULT
    return carrier.estimate_zone(origin_zip, destination_zip)


# =============================================================================
# RATE TABLES
# =============================================================================

@dataclass(frozen=True)
class LoadOutcome:
    """Result of loading one carrier's rate table."""

    carrier: str
    table: RateTable | None = None
    error: MalformedTableError | None = None

    @property
    def ok(self) -> bool:
        return self.table is not None


def load_rate_table(carrier_id: str, rows: Rows) -> RateTable:
    """
    Parse raw rate sheet rows for one carrier.

    Raises:
        MalformedTableError: If the carrier is unknown or the sheet is malformed
    """
    carrier = match_carrier(carrier_id)
    if carrier is None:
        raise MalformedTableError(carrier_id, "unrecognized carrier")
    return carrier.parse_rate_table(rows)


def load_rate_tables(sources: Mapping[str, Rows] | None = None) -> dict[str, LoadOutcome]:
    """
    Load rate tables for several carriers independently.

    One carrier failing does not stop the others. Each failure is logged
    once; callers get the full outcome per carrier. When two source ids
    match the same carrier, the first is loaded and the rest are logged
    and ignored.

    Args:
        sources: carrier id -> raw rows. Defaults to every carrier's bundled
            reference rate sheet.

    Returns:
        Carrier name -> LoadOutcome
    """
    if sources is None:
        sources = {carrier.name: None for carrier in ALL}

    outcomes: dict[str, LoadOutcome] = {}
    for carrier_id, rows in sources.items():
        carrier = match_carrier(carrier_id)
        name = carrier.name if carrier is not None else carrier_id

        # First source for a carrier wins
        if name in outcomes:
            logger.error(f"Ignoring {name} rates from '{carrier_id}': {name} already has a source")
            continue

        try:
            if carrier is None:
                raise MalformedTableError(carrier_id, "unrecognized carrier")
            if rows is None:
                rows = _read_reference_rows(carrier)
            table = carrier.parse_rate_table(rows)
        except MalformedTableError as e:
            logger.error(f"Failed to load {name} rates: {e}")
            outcomes[name] = LoadOutcome(carrier=name, error=e)
            continue

        logger.info(f"Loaded {len(table.brackets)} {name} rate brackets")
        outcomes[name] = LoadOutcome(carrier=name, table=table)

    return outcomes


def loaded_tables(outcomes: Mapping[str, LoadOutcome]) -> dict[str, RateTable]:
    """Carrier name -> table for the carriers that loaded."""
    return {name: o.table for name, o in outcomes.items() if o.ok}


def _read_reference_rows(carrier: type[Carrier]) -> list[list[str]]:
    """Bundled rate sheet rows, read errors reported as a malformed table."""
    try:
        return carrier.load_rate_rows()
    except (OSError, pl.exceptions.PolarsError) as e:
        raise MalformedTableError(carrier.name, f"could not read reference rates: {e}") from e


# =============================================================================
# VALIDATION
# =============================================================================

def validate_carriers() -> None:
    """
    Validate carrier configuration integrity.

    Raises ValueError if any configuration issues are found.
    Called at import time to fail fast on configuration errors.
    """
    names = [c.name for c in ALL]
    errors = []

    if len(set(names)) != len(names):
        errors.append(f"duplicate carrier names: {names}")

    for i, c in enumerate(ALL):
        # A later carrier must not be shadowed by an earlier token it contains
        for earlier in ALL[:i]:
            if earlier.match_token in c.match_token:
                errors.append(f"{c.name}: match_token '{c.match_token}' is shadowed by {earlier.name}")

        if c.match_token != c.match_token.lower():
            errors.append(f"{c.name}: match_token must be lowercase")

        # Bands must be strictly ascending and land on declared zones
        bounds = [upper for upper, _ in c.zone_bands]
        if bounds != sorted(set(bounds)):
            errors.append(f"{c.name}: zone_bands must be strictly ascending")

        band_zones = {zone for _, zone in c.zone_bands} | {c.far_zone}
        if not band_zones <= c.zones:
            errors.append(f"{c.name}: zone_bands use zones outside {sorted(c.zones)}")

        for zone, fallback in c.zone_fallbacks.items():
            if zone not in c.zones or fallback not in c.zones:
                errors.append(f"{c.name}: zone fallback {zone} -> {fallback} uses unknown zones")

    if errors:
        raise ValueError("Carrier configuration errors:\n  " + "\n  ".join(errors))


# Run validation at import time
validate_carriers()

__all__ = [
    # Carriers
    "Carrier",
    "FedEx",
    "USPS",
    "UPS",
    "ALL",
    "ESTIMATION_DEFAULT",
    # Matching
    "match_carrier",
    "get_carrier",
    # Zones
    "estimate_zone",
    # Rate tables
    "LoadOutcome",
    "load_rate_table",
    "load_rate_tables",
    "loaded_tables",
    # Validation
    "validate_carriers",
]
