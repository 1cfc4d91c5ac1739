"""
Compare Shipments
=================

Runs a shipment export (CSV) through the savings calculator and prints how
much could be saved with negotiated rates.

The CSV needs CARRIER, ORIGIN_ZIP and DESTINATION_ZIP columns, plus
PKG_WEIGHT_IN_GRAMS and a label rate column for meaningful results. All
columns are read as text so ZIP codes keep their leading zeros.

Usage:
    python -m savings.scripts.compare_shipments shipments.csv
    python -m savings.scripts.compare_shipments shipments.csv --output savings.csv
"""

import argparse
import sys
from pathlib import Path

import polars as pl

from savings.calculate_savings import summarize
from savings.engine import SavingsEngine
from savings.version import VERSION


# Columns shown in the per-shipment table
DISPLAY_COLS = [
    "CARRIER",
    "ORIGIN_ZIP",
    "DESTINATION_ZIP",
    "zone",
    "weight_lbs",
    "current_rate",
    "negotiated_rate",
    "savings",
    "is_loop",
]


def load_shipments(path: Path) -> pl.DataFrame:
    """Read a shipment export with every column as text."""
    return pl.read_csv(path, infer_schema_length=0)


def print_summary(df: pl.DataFrame, engine: SavingsEngine) -> None:
    """Print load status, top loops and totals."""
    print("\n" + "=" * 60)
    print("SAVINGS SUMMARY")
    print("=" * 60)

    for outcome in engine.load_report:
        status = f"{len(outcome.table.brackets)} brackets" if outcome.ok else f"FAILED ({outcome.error})"
        print(f"  {outcome.carrier:<8} {status}")

    stats = summarize(df)
    print(f"\nShipments:          {stats['total_records']:>10,}")
    print(f"Loops:              {stats['loop_count']:>10,}")
    print(f"Total savings:      ${stats['total_savings']:>10,.2f}")
    print(f"Average savings:    ${stats['average_savings']:>10,.2f}")

    if stats["loop_count"]:
        print("\n--- Largest Loops ---")
        top = (
            df.filter(pl.col("is_loop"))
            .sort("savings", descending=True)
            .head(10)
            .select([c for c in DISPLAY_COLS if c in df.columns])
        )
        print(top)
    print()


def main():
    parser = argparse.ArgumentParser(
        description="Compare shipment label rates with negotiated rates",
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Shipment export CSV"
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write every calculated shipment to this CSV"
    )

    args = parser.parse_args()

    try:
        print(f"Savings calculator {VERSION}")
        engine = SavingsEngine.from_reference()

        shipments = load_shipments(args.input)
        print(f"Loaded {shipments.height:,} shipments from {args.input}")

        result = engine.calculate_frame(shipments)
        print_summary(result, engine)

        if args.output:
            result.write_csv(args.output)
            print(f"Wrote {result.height:,} rows to {args.output}")

    except KeyboardInterrupt:
        print("\n\nCancelled.")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        raise


if __name__ == "__main__":
    main()
