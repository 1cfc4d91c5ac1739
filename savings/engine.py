"""
Savings Engine

Holds the loaded rate tables and answers savings questions for single
records and batches. Build it once and reuse it; tables never change after
loading.

Usage:
    from savings import SavingsEngine

    engine = SavingsEngine.from_reference()
    result = engine.calculate_savings(record)
    results = engine.process_batch(records)
"""

from typing import Any, Callable, Iterable, Mapping

import polars as pl

from carriers import LoadOutcome, estimate_zone, load_rate_tables, loaded_tables
from shared.carrier import Rows
from shared.logger import get_logger
from shared.rates import RateTable

from .calculate_savings import SavingsResult, calculate_savings, calculate_savings_frame
from .columns import CARRIER, ORIGIN_ZIP, DESTINATION_ZIP


logger = get_logger(__name__)

# (carrier, origin_zip, destination_zip) -> zone, or None when it has no answer
ZoneSource = Callable[[str, Any, Any], str | None]

# Failures that turn one record into an error row instead of aborting a batch
RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


class SavingsEngine:
    """
    Savings calculator over a fixed set of carrier rate tables.

    Attributes:
        tables      - Carrier name -> RateTable for carriers that loaded
        load_report - LoadOutcome per carrier, including failures
    """

    def __init__(
        self,
        tables: Mapping[str, RateTable],
        load_report: Iterable[LoadOutcome] = (),
    ):
        self._tables = dict(tables)
        self._load_report = tuple(load_report)

    @classmethod
    def from_reference(cls) -> "SavingsEngine":
        """Engine over every carrier's bundled reference rate sheet."""
        return cls._from_outcomes(load_rate_tables())

    @classmethod
    def from_sources(cls, sources: Mapping[str, Rows]) -> "SavingsEngine":
        """Engine over raw rate sheet rows keyed by carrier id."""
        return cls._from_outcomes(load_rate_tables(sources))

    @classmethod
    def _from_outcomes(cls, outcomes: Mapping[str, LoadOutcome]) -> "SavingsEngine":
        return cls(loaded_tables(outcomes), outcomes.values())

    @property
    def tables(self) -> Mapping[str, RateTable]:
        return self._tables

    @property
    def load_report(self) -> tuple[LoadOutcome, ...]:
        return self._load_report

    # -------------------------------------------------------------------------
    # ZONES
    # -------------------------------------------------------------------------

    def estimate_zone(self, carrier_name: str | None, origin_zip, destination_zip) -> str:
        return estimate_zone(carrier_name, origin_zip, destination_zip)

    def resolve_zone(
        self,
        record: Mapping[str, Any],
        zone_source: ZoneSource | None = None,
    ) -> str:
        """
        Zone for a record.

        Asks zone_source first when given. A source that raises or returns
        nothing falls back to the distance-band estimate.
        """
        carrier_name = record.get(CARRIER)
        origin_zip = record.get(ORIGIN_ZIP)
        destination_zip = record.get(DESTINATION_ZIP)

        if zone_source is not None:
            try:
                zone = zone_source(carrier_name, origin_zip, destination_zip)
            except Exception as e:
                logger.warning(f"Zone lookup failed for {carrier_name}, using estimate: {e}")
                zone = None
            if zone is not None and str(zone).strip():
                return str(zone)

        return self.estimate_zone(carrier_name, origin_zip, destination_zip)

    # -------------------------------------------------------------------------
    # SAVINGS
    # -------------------------------------------------------------------------

    def calculate_savings(
        self,
        record: Mapping[str, Any],
        zone: str | None = None,
        zone_source: ZoneSource | None = None,
    ) -> SavingsResult:
        """
        Savings for one record.

        Raises:
            KeyError: If the record has no CARRIER field
        """
        if zone is None:
            zone = self.resolve_zone(record, zone_source)
        return calculate_savings(record, zone, self._tables)

    def process_batch(
        self,
        records: Iterable[Mapping[str, Any]],
        zone_source: ZoneSource | None = None,
    ) -> list[SavingsResult]:
        """
        Savings for every record, in input order.

        A record that cannot be processed gets an error result (zone "Error",
        no savings, not a loop). The batch always completes.
        """
        results = []
        for idx, record in enumerate(records):
            try:
                results.append(self.calculate_savings(record, zone_source=zone_source))
            except RECORD_ERRORS as e:
                logger.warning(f"Record {idx} could not be processed: {e!r}")
                results.append(SavingsResult.error())
        return results

    def calculate_frame(self, df: pl.DataFrame) -> pl.DataFrame:
        """Vectorized savings for a shipment DataFrame."""
        return calculate_savings_frame(df, self._tables)


__all__ = ["SavingsEngine", "ZoneSource"]
