"""
Unit Tests for the Savings Calculator

Tests single-record savings, the DataFrame pipeline, and summaries.

Run with: pytest savings/tests/test_calculate_savings.py -v
"""

import math

import pytest
import polars as pl

from carriers import load_rate_table, load_rate_tables, loaded_tables
from savings.calculate_savings import (
    SavingsResult,
    calculate,
    calculate_savings,
    calculate_savings_frame,
    current_rate,
    negotiated_rate,
    package_weight_lbs,
    summarize,
    summarize_results,
    supplement_shipments,
)
from savings.columns import AFTER_CALCULATE, AFTER_SUPPLEMENT
from savings.version import VERSION
from shared.rates import RateTable


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(scope="module")
def tables():
    """Every carrier's bundled reference rates."""
    return loaded_tables(load_rate_tables())


@pytest.fixture
def usps_record():
    return {
        "CARRIER": "USPS",
        "ORIGIN_ZIP": "10001",
        "DESTINATION_ZIP": "30001",
        "PKG_WEIGHT_IN_GRAMS": "907.18",
        "TOTAL_LABEL_RATE_SHOPPER_CURRENCY": "$9.50",
    }


@pytest.fixture
def shipments():
    """Mixed carriers; the last row comes with a zone from a zone service."""
    return pl.DataFrame({
        "CARRIER": ["USPS Ground Advantage", "FedEx Ground", "UPS Ground", "DHL Express", "usps"],
        "ORIGIN_ZIP": ["10001", "10001", "10001", "10001", "10001"],
        "DESTINATION_ZIP": ["10001", "99501", "30001", "10001", "10001"],
        "PKG_WEIGHT_IN_GRAMS": ["907.18", "907.18", "907.18", "907.18", "20000"],
        "TOTAL_LABEL_RATE_SHOPPER_CURRENCY": ["$9.50", "", None, "$5.00", "$50.00"],
        "TOTAL_LABEL_RATE_USD": ["1.00", "$20.00", "$11.20", None, None],
        "zone": [None, None, "", None, "Zone 9"],
    })


def run_pipeline(df: pl.DataFrame, tables) -> pl.DataFrame:
    """Helper to run full pipeline."""
    df = supplement_shipments(df)
    df = calculate(df, tables)
    return df


# =============================================================================
# SINGLE RECORD TESTS
# =============================================================================

class TestFieldParsing:
    """Tests for weight and current rate extraction."""

    def test_grams_to_pounds(self):
        assert package_weight_lbs({"PKG_WEIGHT_IN_GRAMS": "453.592"}) == 1.0

    def test_missing_weight_is_nan(self):
        assert math.isnan(package_weight_lbs({}))
        assert math.isnan(package_weight_lbs({"PKG_WEIGHT_IN_GRAMS": "heavy"}))

    def test_shopper_currency_preferred(self):
        record = {
            "TOTAL_LABEL_RATE_SHOPPER_CURRENCY": "$1,234.56",
            "TOTAL_LABEL_RATE_USD": "$2.00",
        }
        assert current_rate(record) == pytest.approx(1234.56)

    def test_usd_when_shopper_empty(self):
        record = {"TOTAL_LABEL_RATE_SHOPPER_CURRENCY": "", "TOTAL_LABEL_RATE_USD": "$2.00"}
        assert current_rate(record) == pytest.approx(2.0)

    def test_no_rate_is_zero(self):
        assert current_rate({}) == 0.0

    def test_unparsable_rate_is_zero(self):
        assert current_rate({"TOTAL_LABEL_RATE_USD": "n/a"}) == 0.0


class TestCalculateSavings:
    """Tests for calculate_savings on one record."""

    def test_usps_two_pounds_zone_4(self, usps_record, tables):
        result = calculate_savings(usps_record, "4", tables)

        assert result.zone == "4"
        assert result.negotiated_rate == pytest.approx(6.25)
        assert result.savings == pytest.approx(3.25)
        assert result.is_loop is True

    def test_tie_is_not_a_loop(self, usps_record, tables):
        record = {**usps_record, "TOTAL_LABEL_RATE_SHOPPER_CURRENCY": "$6.25"}
        result = calculate_savings(record, "4", tables)

        assert result.savings == pytest.approx(0.0)
        assert result.is_loop is False

    def test_cheaper_label_is_not_a_loop(self, usps_record, tables):
        record = {**usps_record, "TOTAL_LABEL_RATE_SHOPPER_CURRENCY": "$5.00"}
        result = calculate_savings(record, "4", tables)

        assert result.savings == pytest.approx(-1.25)
        assert result.is_loop is False

    def test_heavier_than_table(self, usps_record, tables):
        record = {**usps_record, "PKG_WEIGHT_IN_GRAMS": "45000"}
        result = calculate_savings(record, "8", tables)
        assert result.negotiated_rate == pytest.approx(40.45)

    def test_missing_weight_uses_heaviest_bracket(self, usps_record, tables):
        record = {**usps_record, "PKG_WEIGHT_IN_GRAMS": ""}
        result = calculate_savings(record, "8", tables)
        assert result.negotiated_rate == pytest.approx(40.45)

    def test_usps_zone_9_falls_back_to_zone_8(self, usps_record, tables):
        record = {**usps_record, "PKG_WEIGHT_IN_GRAMS": "9000"}
        result = calculate_savings(record, "9", tables)
        assert result.negotiated_rate == pytest.approx(40.45)

    def test_fedex_zone_9_does_not_fall_back(self, usps_record, tables):
        record = {**usps_record, "CARRIER": "FedEx Ground"}
        result = calculate_savings(record, "9", tables)

        assert result.negotiated_rate == 0.0
        assert result.is_loop is True

    def test_zone_label_accepted(self, usps_record, tables):
        result = calculate_savings(usps_record, "Zone 4", tables)
        assert result.zone == "Zone 4"
        assert result.negotiated_rate == pytest.approx(6.25)

    def test_unknown_carrier_not_defaulted_to_usps(self, usps_record, tables):
        record = {**usps_record, "CARRIER": "DHL Express"}
        result = calculate_savings(record, "4", tables)

        assert result.negotiated_rate == 0.0
        assert result.savings == 0.0
        assert result.is_loop is False

    def test_failed_carrier(self, usps_record, tables):
        """A carrier whose table did not load gets no negotiated rate."""
        without_usps = {k: v for k, v in tables.items() if k != "USPS"}
        result = calculate_savings(usps_record, "4", without_usps)

        assert result.negotiated_rate == 0.0
        assert result.is_loop is False

    def test_missing_carrier_field(self, usps_record, tables):
        del usps_record["CARRIER"]
        with pytest.raises(KeyError):
            calculate_savings(usps_record, "4", tables)

    def test_negotiated_rate_helper(self, tables):
        assert negotiated_rate("usps ground", 2.0, "4", tables) == pytest.approx(6.25)
        assert negotiated_rate("DHL", 2.0, "4", tables) == 0.0


class TestSummarizeResults:

    def test_only_loops_count(self):
        results = [
            SavingsResult("4", 6.25, 3.25, True),
            SavingsResult("4", 6.25, -1.00, False),
            SavingsResult("2", 5.00, 0.75, True),
            SavingsResult.error(),
        ]
        summary = summarize_results(results)

        assert summary["total_records"] == 4
        assert summary["loop_count"] == 2
        assert summary["total_savings"] == pytest.approx(4.00)
        assert summary["average_savings"] == pytest.approx(2.00)

    def test_empty(self):
        summary = summarize_results([])
        assert summary["loop_count"] == 0
        assert summary["average_savings"] == 0.0


# =============================================================================
# SUPPLEMENT TESTS
# =============================================================================

class TestSupplementShipments:
    """Tests for supplement_shipments columns."""

    def test_columns_added(self, shipments):
        df = supplement_shipments(shipments)
        assert set(AFTER_SUPPLEMENT) <= set(df.columns)

    def test_carrier_family(self, shipments):
        df = supplement_shipments(shipments)
        assert df["carrier_family"].to_list() == ["USPS", "FedEx", "UPS", None, "USPS"]

    def test_weight_lbs(self, shipments):
        df = supplement_shipments(shipments)
        assert df["weight_lbs"][0] == pytest.approx(907.18 / 453.592)

    def test_current_rate_fallback(self, shipments):
        df = supplement_shipments(shipments)
        assert df["current_rate"].to_list() == pytest.approx([9.50, 20.00, 11.20, 5.00, 50.00])

    def test_estimated_zone_per_carrier(self, shipments):
        df = supplement_shipments(shipments)
        # Unknown carriers are estimated with USPS bands
        assert df["estimated_zone"].to_list() == ["2", "6", "4", "2", "2"]

    def test_provided_zone_wins(self, shipments):
        df = supplement_shipments(shipments)
        assert df["zone"].to_list() == ["2", "6", "4", "2", "Zone 9"]
        assert df["rate_zone"][4] == "9"

    def test_without_zone_column(self, shipments):
        df = supplement_shipments(shipments.drop("zone"))
        assert df["zone"].to_list() == df["estimated_zone"].to_list()

    def test_numeric_zip_keeps_leading_zero(self):
        df = pl.DataFrame({
            "CARRIER": ["USPS"],
            "ORIGIN_ZIP": [2134],
            "DESTINATION_ZIP": ["02134"],
        })
        df = supplement_shipments(df)
        assert df["estimated_zone"][0] == "2"

    def test_non_digit_zip_is_far_zone(self):
        df = pl.DataFrame({
            "CARRIER": ["FedEx"],
            "ORIGIN_ZIP": ["ABCDE"],
            "DESTINATION_ZIP": ["10001"],
        })
        df = supplement_shipments(df)
        assert df["estimated_zone"][0] == "9"

    def test_missing_required_column(self, shipments):
        with pytest.raises(ValueError, match="CARRIER"):
            supplement_shipments(shipments.drop("CARRIER"))


# =============================================================================
# CALCULATE TESTS
# =============================================================================

class TestCalculate:
    """Tests for the vectorized rate lookup and savings."""

    def test_columns_added(self, shipments, tables):
        df = run_pipeline(shipments, tables)
        assert set(AFTER_CALCULATE) <= set(df.columns)
        assert df["calculator_version"][0] == VERSION

    def test_row_order_and_count(self, shipments, tables):
        df = run_pipeline(shipments, tables)
        assert df.height == shipments.height
        assert df["CARRIER"].to_list() == shipments["CARRIER"].to_list()

    def test_negotiated_rates(self, shipments, tables):
        df = run_pipeline(shipments, tables)
        assert df["negotiated_rate"].to_list() == pytest.approx([5.35, 12.50, 11.20, 0.0, 40.45])

    def test_bracket_selection(self, shipments, tables):
        df = run_pipeline(shipments, tables)
        assert df["bracket_weight_lbs"].to_list() == [2.0, 2.0, 2.0, None, 20.0]

    def test_savings_and_loops(self, shipments, tables):
        df = run_pipeline(shipments, tables)
        assert df["savings"].to_list() == pytest.approx([4.15, 7.50, 0.0, 0.0, 9.55])
        assert df["is_loop"].to_list() == [True, True, False, False, True]

    def test_unparsable_weight_uses_heaviest_bracket(self, shipments, tables):
        shipments = shipments.with_columns(pl.lit("unknown").alias("PKG_WEIGHT_IN_GRAMS"))
        df = run_pipeline(shipments, tables)
        assert df["bracket_weight_lbs"].to_list() == [20.0, 70.0, 50.0, None, 20.0]

    def test_no_tables(self, shipments):
        df = run_pipeline(shipments, {})
        assert df["negotiated_rate"].to_list() == [0.0] * 5
        assert not df["is_loop"].any()

    def test_matches_single_record_path(self, shipments, tables):
        df = calculate_savings_frame(shipments, tables)

        for row in df.to_dicts():
            result = calculate_savings(row, row["zone"], tables)
            assert row["negotiated_rate"] == pytest.approx(result.negotiated_rate)
            assert row["savings"] == pytest.approx(result.savings)
            assert row["is_loop"] == result.is_loop


# Weight 3 has no rates; lighter rows must not skip past it
BLANK_ROW_SHEET = [
    ["FedEx Ground"],
    ["Weight", "2", "3"],
    ["1", "$9.00", "$9.60"],
    ["3", "", ""],
    ["5", "$11.00", "$12.20"],
]


class TestBlankBracket:
    """Frame and single record paths agree when a bracket has no rates."""

    @pytest.fixture
    def fedex_tables(self):
        return {"FedEx": load_rate_table("FedEx", BLANK_ROW_SHEET)}

    @pytest.fixture
    def fedex_shipments(self):
        grams = ["300", "1133.98", "2000", "5000"]
        return pl.DataFrame({
            "CARRIER": ["FedEx Ground"] * len(grams),
            "ORIGIN_ZIP": ["10001"] * len(grams),
            "DESTINATION_ZIP": ["10001"] * len(grams),
            "PKG_WEIGHT_IN_GRAMS": grams,
            "TOTAL_LABEL_RATE_SHOPPER_CURRENCY": ["$10.00"] * len(grams),
            "TOTAL_LABEL_RATE_USD": [None] * len(grams),
            "zone": ["2"] * len(grams),
        })

    def test_frame_matches_single_record_path(self, fedex_shipments, fedex_tables):
        df = calculate_savings_frame(fedex_shipments, fedex_tables)

        for row in df.to_dicts():
            result = calculate_savings(row, row["zone"], fedex_tables)
            assert row["negotiated_rate"] == pytest.approx(result.negotiated_rate)
            assert row["savings"] == pytest.approx(result.savings)
            assert row["is_loop"] == result.is_loop

    def test_blank_bracket_selected(self, fedex_shipments, fedex_tables):
        df = calculate_savings_frame(fedex_shipments, fedex_tables)
        assert df["bracket_weight_lbs"].to_list() == [1.0, 3.0, 5.0, 5.0]
        assert df["negotiated_rate"].to_list() == pytest.approx([9.0, 0.0, 11.0, 11.0])

    def test_bracket_without_any_zones(self, fedex_shipments):
        tables = {"FedEx": RateTable.from_rows("FedEx", [(1.0, {"2": 9.0}), (3.0, {}), (5.0, {"2": 11.0})])}
        df = calculate_savings_frame(fedex_shipments, tables)
        assert df["bracket_weight_lbs"].to_list() == [1.0, 3.0, 5.0, 5.0]
        assert df["negotiated_rate"].to_list() == pytest.approx([9.0, 0.0, 11.0, 11.0])


# =============================================================================
# SUMMARY TESTS
# =============================================================================

class TestSummarize:

    def test_summary(self, shipments, tables):
        summary = summarize(run_pipeline(shipments, tables))

        assert summary["total_records"] == 5
        assert summary["loop_count"] == 3
        assert summary["total_savings"] == pytest.approx(21.20)
        assert summary["average_savings"] == pytest.approx(21.20 / 3)

    def test_null_loops_not_counted(self):
        df = pl.DataFrame({
            "savings": [3.0, 5.0, 1.0],
            "is_loop": [True, None, False],
        })
        summary = summarize(df)

        assert summary["loop_count"] == 1
        assert summary["total_savings"] == pytest.approx(3.0)

    def test_no_loops(self):
        df = pl.DataFrame({"savings": [-1.0], "is_loop": [False]})
        summary = summarize(df)
        assert summary["total_savings"] == 0.0
        assert summary["average_savings"] == 0.0
