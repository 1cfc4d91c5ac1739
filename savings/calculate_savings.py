"""
Savings Calculator

Compares what a shipment was charged (the rate shopper's label rate) with
the negotiated rate from the carrier's rate table. A shipment whose current
rate is higher than the negotiated one is a "loop": money left on the table.

Two entry points share the same rules:

    calculate_savings()         - one shipment record (a mapping) at a time
    calculate_savings_frame()   - a whole DataFrame, vectorized with polars

REQUIRED INPUT FIELDS
---------------------
    CARRIER                             - Free-text carrier name
    ORIGIN_ZIP                          - Origin ZIP (frame only, for zones)
    DESTINATION_ZIP                     - Destination ZIP (frame only)

OPTIONAL INPUT FIELDS
---------------------
    PKG_WEIGHT_IN_GRAMS                 - Declared weight in grams
    TOTAL_LABEL_RATE_SHOPPER_CURRENCY   - Current rate (preferred)
    TOTAL_LABEL_RATE_USD                - Current rate (fallback)
    zone                                - Zone already resolved elsewhere

RULES
-----
    weight      - grams / 453.592. No usable weight -> heaviest bracket.
    current     - first non-empty of shopper currency, USD. "$", "," and
                  whitespace are stripped. Nothing usable -> 0.
    negotiated  - table lookup for the matched carrier. Unknown carrier or
                  carrier whose table failed to load -> 0.
    savings     - current - negotiated. 0 when there is no table to compare
                  against (unknown or failed carrier).
    is_loop     - savings > 0

OUTPUT COLUMNS ADDED
--------------------
    supplement_shipments() adds:
        - carrier_family, weight_lbs, current_rate
        - estimated_zone, zone, rate_zone

    calculate() adds:
        - bracket_weight_lbs, negotiated_rate, savings, is_loop
        - calculator_version

USAGE
-----
    from savings.calculate_savings import calculate_savings_frame
    result = calculate_savings_frame(df, tables)
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import polars as pl

from carriers import ALL, ESTIMATION_DEFAULT, match_carrier
from shared.carrier import Carrier
from shared.rates import (
    GRAMS_PER_POUND,
    RateTable,
    lookup_rate,
    parse_number,
    parse_rate,
    rate_frame,
)
from shared.rates.parsing import LEADING_INTEGER, LEADING_NUMBER, RATE_NOISE, ZONE_LABEL
from shared.zones import PREFIX_LENGTH, ZIP_LENGTH

from .columns import (
    CARRIER,
    ORIGIN_ZIP,
    DESTINATION_ZIP,
    WEIGHT_GRAMS,
    RATE_SHOPPER_CURRENCY,
    RATE_USD,
)
from .version import VERSION


# Zone reported for records that could not be processed
ERROR_ZONE = "Error"

# Current rate fields in order of preference
CURRENT_RATE_FIELDS = (RATE_SHOPPER_CURRENCY, RATE_USD)


# =============================================================================
# RESULT
# =============================================================================

@dataclass(frozen=True)
class SavingsResult:
    """Savings for one shipment."""

    zone: str
    negotiated_rate: float
    savings: float
    is_loop: bool

    @classmethod
    def error(cls) -> "SavingsResult":
        """Placeholder result for a record that failed."""
        return cls(zone=ERROR_ZONE, negotiated_rate=0.0, savings=0.0, is_loop=False)

    @property
    def is_error(self) -> bool:
        return self.zone == ERROR_ZONE


# =============================================================================
# SINGLE RECORD
# =============================================================================

def package_weight_lbs(record: Mapping[str, Any]) -> float:
    """Declared weight in pounds, NaN when missing or unparsable."""
    grams = parse_number(record.get(WEIGHT_GRAMS))
    if grams is None:
        return math.nan
    return grams / GRAMS_PER_POUND


def current_rate(record: Mapping[str, Any]) -> float:
    """Current label rate: first non-empty rate field, sanitized. 0.0 if none."""
    for field_name in CURRENT_RATE_FIELDS:
        value = record.get(field_name)
        if value is not None and str(value).strip():
            return parse_rate(value)
    return 0.0


def rate_table_for(
    carrier_name: str | None,
    tables: Mapping[str, RateTable],
) -> RateTable | None:
    """Loaded table of the matched carrier. Unknown carriers do not default to USPS."""
    carrier = match_carrier(carrier_name)
    if carrier is None:
        return None
    return tables.get(carrier.name)


def negotiated_rate(
    carrier_name: str | None,
    weight_lbs: float,
    zone: str | None,
    tables: Mapping[str, RateTable],
) -> float:
    """Negotiated rate from the matched carrier's table, 0.0 if there is none."""
    return lookup_rate(rate_table_for(carrier_name, tables), weight_lbs, zone)


def calculate_savings(
    record: Mapping[str, Any],
    zone: str,
    tables: Mapping[str, RateTable],
) -> SavingsResult:
    """
    Savings for one shipment record.

    Args:
        record: Shipment fields (see module docstring)
        zone: Zone for the shipment (estimated or from a zone service)
        tables: Carrier name -> loaded rate table

    Returns:
        SavingsResult with the zone passed in

    Raises:
        KeyError: If the record has no CARRIER field
    """
    table = rate_table_for(record[CARRIER], tables)
    if table is None:
        # Nothing to compare against: never a loop
        return SavingsResult(zone=zone, negotiated_rate=0.0, savings=0.0, is_loop=False)

    weight = package_weight_lbs(record)
    current = current_rate(record)
    negotiated = lookup_rate(table, weight, zone)
    savings = current - negotiated

    return SavingsResult(
        zone=zone,
        negotiated_rate=negotiated,
        savings=savings,
        is_loop=savings > 0,
    )


def summarize_results(results: Iterable[SavingsResult]) -> dict:
    """Totals over per-record results. Only loops count toward savings."""
    results = list(results)
    loops = [r for r in results if r.is_loop]
    total = sum(r.savings for r in loops)

    return {
        "total_records": len(results),
        "loop_count": len(loops),
        "total_savings": total,
        "average_savings": total / len(loops) if loops else 0.0,
    }


# =============================================================================
# DATAFRAME ENTRY POINT
# =============================================================================

def calculate_savings_frame(
    df: pl.DataFrame,
    tables: Mapping[str, RateTable],
) -> pl.DataFrame:
    """
    Calculate savings for a shipment DataFrame.

    Args:
        df: Shipment DataFrame with required columns (see module docstring)
        tables: Carrier name -> loaded rate table

    Returns:
        DataFrame with supplemented data, negotiated rates and savings
    """
    df = supplement_shipments(df)
    df = calculate(df, tables)
    return df


# =============================================================================
# SUPPLEMENT SHIPMENTS
# =============================================================================

def supplement_shipments(df: pl.DataFrame) -> pl.DataFrame:
    """
    Supplement shipment data with carrier, weight, rate and zone columns.

    Args:
        df: Raw shipment DataFrame

    Returns:
        DataFrame with added columns:
            - carrier_family, weight_lbs, current_rate
            - estimated_zone, zone, rate_zone
    """
    missing = [c for c in (CARRIER, ORIGIN_ZIP, DESTINATION_ZIP) if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df = _add_carrier_family(df)
    df = _add_weight(df)
    df = _add_current_rate(df)
    df = _add_zones(df)

    return df


def _add_carrier_family(df: pl.DataFrame) -> pl.DataFrame:
    """Matched carrier name, first match in ALL order wins."""
    name = pl.col(CARRIER).cast(pl.Utf8).str.to_lowercase()

    family = pl.lit(None, dtype=pl.Utf8)
    for carrier in reversed(ALL):
        family = (
            pl.when(name.str.contains(carrier.match_token, literal=True))
            .then(pl.lit(carrier.name))
            .otherwise(family)
        )

    return df.with_columns(family.alias("carrier_family"))


def _leading_number(df: pl.DataFrame, column: str) -> pl.Expr:
    """Leading number of a column as Float64, null when there is none."""
    if df.schema[column].is_numeric():
        return pl.col(column).cast(pl.Float64)
    return (
        pl.col(column).cast(pl.Utf8)
        .str.extract(LEADING_NUMBER, 1)
        .cast(pl.Float64, strict=False)
    )


def _add_weight(df: pl.DataFrame) -> pl.DataFrame:
    """Declared grams to pounds."""
    if WEIGHT_GRAMS not in df.columns:
        return df.with_columns(pl.lit(None, dtype=pl.Float64).alias("weight_lbs"))

    return df.with_columns(
        (_leading_number(df, WEIGHT_GRAMS) / GRAMS_PER_POUND).alias("weight_lbs")
    )


def _add_current_rate(df: pl.DataFrame) -> pl.DataFrame:
    """First non-empty rate field, sanitized. 0 when nothing is usable."""
    rate = pl.lit(0.0)
    for column in reversed([c for c in CURRENT_RATE_FIELDS if c in df.columns]):
        text = pl.col(column).cast(pl.Utf8)
        parsed = (
            text.str.replace_all(RATE_NOISE, "")
            .str.extract(LEADING_NUMBER, 1)
            .cast(pl.Float64, strict=False)
            .fill_null(0.0)
        )
        rate = (
            pl.when(text.is_not_null() & (text.str.strip_chars() != ""))
            .then(parsed)
            .otherwise(rate)
        )

    return df.with_columns(rate.alias("current_rate"))


def _zip_prefix(df: pl.DataFrame, column: str) -> pl.Expr:
    """Numeric 3-digit ZIP prefix, null when there is none."""
    zip_text = pl.col(column).cast(pl.Utf8)
    if df.schema[column].is_integer():
        # Leading zeros are lost when ZIPs are stored as numbers
        zip_text = zip_text.str.zfill(ZIP_LENGTH)

    return (
        zip_text.str.slice(0, PREFIX_LENGTH)
        .str.extract(LEADING_INTEGER, 1)
        .cast(pl.Int64, strict=False)
    )


def _band_zone(distance: pl.Expr, carrier: type[Carrier]) -> pl.Expr:
    """Carrier's distance bands as a when/then chain."""
    zone = pl.lit(carrier.far_zone)
    for upper, band in reversed(carrier.zone_bands):
        zone = pl.when(distance <= upper).then(pl.lit(band)).otherwise(zone)
    return zone


def _add_zones(df: pl.DataFrame) -> pl.DataFrame:
    """
    Estimate zones and pick the zone used for rate lookup.

    A non-empty "zone" column (from a zone service) takes precedence over the
    estimate. Unmatched carriers are estimated with ESTIMATION_DEFAULT bands.
    """
    distance = (_zip_prefix(df, ORIGIN_ZIP) - _zip_prefix(df, DESTINATION_ZIP)).abs()

    estimated = _band_zone(distance, ESTIMATION_DEFAULT)
    for carrier in reversed(ALL):
        estimated = (
            pl.when(pl.col("carrier_family") == carrier.name)
            .then(_band_zone(distance, carrier))
            .otherwise(estimated)
        )
    df = df.with_columns(estimated.alias("estimated_zone"))

    if "zone" in df.columns:
        provided = pl.col("zone").cast(pl.Utf8).str.strip_chars()
        zone = (
            pl.when(provided.is_not_null() & (provided != ""))
            .then(pl.col("zone").cast(pl.Utf8))
            .otherwise(pl.col("estimated_zone"))
        )
    else:
        zone = pl.col("estimated_zone")
    df = df.with_columns(zone.alias("zone"))

    # "Zone 04" -> "4", anything unrecognized kept for the (failing) lookup
    stripped = pl.col("zone").str.strip_chars()
    return df.with_columns(
        pl.coalesce([stripped.str.extract(ZONE_LABEL, 1), stripped]).alias("rate_zone")
    )


# =============================================================================
# CALCULATE SAVINGS
# =============================================================================

def calculate(df: pl.DataFrame, tables: Mapping[str, RateTable]) -> pl.DataFrame:
    """
    Calculate negotiated rates and savings for supplemented shipments.

    Args:
        df: Supplemented shipment DataFrame from supplement_shipments
        tables: Carrier name -> loaded rate table

    Returns:
        DataFrame with bracket_weight_lbs, negotiated_rate, savings, is_loop
        and calculator_version
    """
    df = _lookup_negotiated_rate(df, tables)
    df = _calculate_savings(df)
    df = _stamp_version(df)
    return df


def _bracket_frame(tables: Mapping[str, RateTable]) -> pl.DataFrame:
    """Every bracket weight of every table, including brackets with no zone rates."""
    return pl.DataFrame(
        [
            {"carrier_family": name, "max_weight_lbs": bracket.max_weight_lbs}
            for name, table in tables.items()
            for bracket in table.brackets
        ],
        schema={"carrier_family": pl.Utf8, "max_weight_lbs": pl.Float64},
    )


def _fallback_frame(tables: Mapping[str, RateTable]) -> pl.DataFrame:
    """Zone fallbacks of every table as (carrier_family, rate_zone, _fallback_zone)."""
    return pl.DataFrame(
        [
            {"carrier_family": name, "rate_zone": zone, "_fallback_zone": fallback}
            for name, table in tables.items()
            for zone, fallback in table.zone_fallbacks.items()
        ],
        schema={"carrier_family": pl.Utf8, "rate_zone": pl.Utf8, "_fallback_zone": pl.Utf8},
    )


def _lookup_negotiated_rate(df: pl.DataFrame, tables: Mapping[str, RateTable]) -> pl.DataFrame:
    """
    Look up the negotiated rate by carrier, weight bracket and zone.

    Bracket is the smallest max weight at or above the shipment weight.
    Shipments heavier than every bracket, or without a weight, use the
    heaviest bracket. Rows with no table or no rate get 0.
    """
    rates = rate_frame(tables).rename({"carrier": "carrier_family"})
    brackets = _bracket_frame(tables)
    heaviest = (
        brackets
        .group_by("carrier_family")
        .agg(pl.col("max_weight_lbs").max().alias("_heaviest_lbs"))
    )

    df = df.with_row_index("_row_id").with_columns(
        pl.col("weight_lbs").cast(pl.Float64)
        .fill_nan(None)
        .fill_null(math.inf)
        .alias("_lookup_lbs")
    )

    closest = (
        df.select(["_row_id", "carrier_family", "_lookup_lbs"])
        .join(brackets, on="carrier_family", how="inner")
        .filter(pl.col("max_weight_lbs") >= pl.col("_lookup_lbs"))
        .group_by("_row_id")
        .agg(pl.col("max_weight_lbs").min().alias("_closest_lbs"))
    )

    df = (
        df
        .join(closest, on="_row_id", how="left")
        .join(heaviest, on="carrier_family", how="left")
        .with_columns(
            pl.coalesce(["_closest_lbs", "_heaviest_lbs"]).alias("bracket_weight_lbs")
        )
    )

    direct_rates = rates.rename({
        "max_weight_lbs": "bracket_weight_lbs",
        "zone": "rate_zone",
        "rate": "_direct_rate",
    })
    fallback_rates = rates.rename({
        "max_weight_lbs": "bracket_weight_lbs",
        "zone": "_fallback_zone",
        "rate": "_fallback_rate",
    })

    df = (
        df
        .join(direct_rates, on=["carrier_family", "bracket_weight_lbs", "rate_zone"], how="left")
        .join(_fallback_frame(tables), on=["carrier_family", "rate_zone"], how="left")
        .join(fallback_rates, on=["carrier_family", "bracket_weight_lbs", "_fallback_zone"], how="left")
    )

    # Fallback zone only when the direct rate is absent or zero
    use_fallback = (
        pl.col("_fallback_zone").is_not_null() &
        (pl.col("_direct_rate").is_null() | (pl.col("_direct_rate") == 0))
    )
    df = df.with_columns(
        pl.when(use_fallback)
        .then(pl.col("_fallback_rate"))
        .otherwise(pl.col("_direct_rate"))
        .fill_null(0.0)
        .alias("negotiated_rate")
    )

    df = df.drop([
        "_lookup_lbs",
        "_closest_lbs",
        "_heaviest_lbs",
        "_direct_rate",
        "_fallback_zone",
        "_fallback_rate",
    ])
    df = df.sort("_row_id").drop("_row_id")

    return df


def _calculate_savings(df: pl.DataFrame) -> pl.DataFrame:
    """Savings and loop flag. Rows without a carrier table have no bracket and no savings."""
    df = df.with_columns(
        pl.when(pl.col("bracket_weight_lbs").is_null())
        .then(pl.lit(0.0))
        .otherwise(pl.col("current_rate") - pl.col("negotiated_rate"))
        .alias("savings")
    )
    return df.with_columns(
        (pl.col("savings") > 0).alias("is_loop")
    )


def _stamp_version(df: pl.DataFrame) -> pl.DataFrame:
    """Stamp calculator version on output."""
    return df.with_columns(pl.lit(VERSION).alias("calculator_version"))


# =============================================================================
# SUMMARY
# =============================================================================

def summarize(df: pl.DataFrame) -> dict:
    """
    Totals over a calculated DataFrame.

    Only rows with is_loop True count toward loop_count and savings. Rows
    with a null is_loop (failed records) are not loops.

    Returns:
        dict with total_records, loop_count, total_savings, average_savings
    """
    loops = df.filter(pl.col("is_loop").fill_null(False))
    loop_count = loops.height
    total = float(loops["savings"].sum()) if loop_count else 0.0

    return {
        "total_records": df.height,
        "loop_count": loop_count,
        "total_savings": total,
        "average_savings": total / loop_count if loop_count else 0.0,
    }


__all__ = [
    "ERROR_ZONE",
    "SavingsResult",
    "package_weight_lbs",
    "current_rate",
    "rate_table_for",
    "negotiated_rate",
    "calculate_savings",
    "summarize_results",
    "calculate_savings_frame",
    "supplement_shipments",
    "calculate",
    "summarize",
]
