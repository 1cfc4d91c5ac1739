"""
Shipping Savings Calculator
===========================

Interactive CLI tool to compare one shipment's label rate with the
negotiated rate.

Usage:
    python -m savings.scripts.calculator
"""

from savings.columns import (
    CARRIER,
    ORIGIN_ZIP,
    DESTINATION_ZIP,
    WEIGHT_GRAMS,
    RATE_SHOPPER_CURRENCY,
)
from savings.engine import SavingsEngine
from savings.calculate_savings import SavingsResult, current_rate, package_weight_lbs
from savings.version import VERSION


def get_user_input() -> dict:
    """Prompt user for shipment details."""
    print("\n=== Shipping Savings Calculator ===")
    print(f"Version: {VERSION}\n")

    carrier = input("Carrier (e.g., USPS Ground Advantage, FedEx Ground, UPS): ").strip()
    origin_zip = input("Origin ZIP code: ").strip()
    destination_zip = input("Destination ZIP code: ").strip()
    weight_grams = input("Weight (grams): ").strip()
    label_rate = input("Label rate paid (e.g., $9.50): ").strip()

    zone = input("Zone [default: estimate from ZIPs]: ").strip()

    return {
        CARRIER: carrier,
        ORIGIN_ZIP: origin_zip,
        DESTINATION_ZIP: destination_zip,
        WEIGHT_GRAMS: weight_grams,
        RATE_SHOPPER_CURRENCY: label_rate,
        "zone": zone or None,
    }


def print_results(result: SavingsResult, record: dict, engine: SavingsEngine) -> None:
    """Print calculation results."""
    print("\n" + "=" * 50)
    print("CALCULATION RESULTS")
    print("=" * 50)

    print(f"\nCarrier: {record[CARRIER]}")
    print(f"Route: {record[ORIGIN_ZIP]} -> {record[DESTINATION_ZIP]} (Zone {result.zone})")
    print(f"Weight: {package_weight_lbs(record):.3f} lbs")

    failed = [o.carrier for o in engine.load_report if not o.ok]
    if failed:
        print(f"\nRate tables not loaded: {', '.join(failed)}")

    print("\n--- Rate Comparison ---")
    print(f"Label rate:         ${current_rate(record):>8.2f}")
    print(f"Negotiated rate:    ${result.negotiated_rate:>8.2f}")
    print(f"                    {'-' * 9}")
    print(f"Savings:            ${result.savings:>8.2f}")
    print()

    if result.is_loop:
        print("Verdict: negotiated rate is cheaper")
    else:
        print("Verdict: label rate is already at or below the negotiated rate")
    print()


def main():
    """Main entry point."""
    try:
        engine = SavingsEngine.from_reference()

        record = get_user_input()
        result = engine.calculate_savings(record, zone=record.pop("zone"))

        print_results(result, record, engine)

    except KeyboardInterrupt:
        print("\n\nCancelled.")
    except Exception as e:
        print(f"\nError: {e}")
        raise


if __name__ == "__main__":
    main()
