"""
Command line entry point for the HPP Pricing Engine.

Developer tool for exercising the engine without a UI. It reads no files.

Usage Examples:
    # Price the built-in sample batch
    python -m src.main sample

    # Price the sample batch with a different strategy and appetite
    python -m src.main sample --strategy TargetMargin --risk-appetite 0.8

    # List available pricing strategies
    python -m src.main strategies

    # Show rounding proposals for a price
    python -m src.main rounding 12.348
"""

import argparse
import dataclasses
import logging
import sys
from decimal import Decimal, InvalidOperation

from src.services.exceptions import ServiceError
from src.services.pricing_engine import PricingEngine, build_sample_request
from src.services.pricing_strategy import strategy_descriptions
from src.services.rounding_engine import rounding_proposals, rounding_rule_instructions
from src.utils.config import get_config
from src.utils.constants import format_currency, format_percent


def print_result(result) -> None:
    """Print the cost breakdown and price band of a result."""
    print("=" * 60)
    print(f"Strategy: {result.strategy_name}")
    print("-" * 60)
    for name, value in result.breakdown.items():
        print(f"  {name:<28} {value:>14.4f}")
    print("-" * 60)
    print(f"  {'Total batch cost':<28} {format_currency(result.total_batch_cost):>14}")
    print(f"  {'Sellable units':<28} {result.sellable_units:>14}")
    print(f"  {'Unit cost (HPP)':<28} {result.unit_cost:>14.4f}")
    print("-" * 60)
    print(f"  {'Suggested price':<28} {format_currency(result.suggested_price):>14}")
    print(
        f"  {'Recommended range':<28} "
        f"{format_currency(result.recommended_price_low)} - "
        f"{format_currency(result.recommended_price_high)}"
    )
    print(f"  {'Price incl. VAT':<28} {format_currency(result.price_inc_vat):>14}")
    print(f"  {'Margin':<28} {format_percent(result.margin):>14}")
    print(f"  {'Confidence':<28} {format_percent(result.pricing_confidence_score):>14}")
    print("=" * 60)
    print(result.recommendation_note)
    for warning in result.warnings:
        print(f"WARNING: {warning}")


def sample_cmd(args) -> int:
    """Price the sample batch, applying any overrides."""
    overrides = {}
    if args.strategy:
        overrides["pricing_strategy"] = args.strategy
    if args.markup is not None:
        overrides["markup"] = args.markup
    if args.risk_appetite is not None:
        overrides["risk_appetite_percent"] = args.risk_appetite
    if args.rounding_rule is not None:
        overrides["rounding_rule"] = args.rounding_rule

    try:
        request = dataclasses.replace(build_sample_request(), **overrides)
        result = PricingEngine().calculate_batch_cost(request)
    except (ServiceError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    print_result(result)
    return 0


def strategies_cmd(args) -> int:
    for name, description in strategy_descriptions().items():
        print(f"{name:<14} {description}")
    return 0


def rounding_cmd(args) -> int:
    try:
        price = Decimal(args.price)
    except InvalidOperation:
        price = None
    if price is None or not price.is_finite():
        print(f"ERROR: '{args.price}' is not a valid price")
        return 1

    print(rounding_rule_instructions())
    print()
    for interval, rounded in rounding_proposals(price).items():
        print(f"  {interval:>6}: {rounded}")
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    config = get_config()
    parser = argparse.ArgumentParser(
        description=f"{config.app_name} developer tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"{config.app_name} {config.app_version}"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    sample_parser = subparsers.add_parser("sample", help="Price the built-in sample batch")
    sample_parser.add_argument("--strategy", help="Pricing strategy name")
    sample_parser.add_argument("--markup", help="Markup as a fraction (0.5 = 50%%)")
    sample_parser.add_argument("--risk-appetite", dest="risk_appetite", help="0 to 1")
    sample_parser.add_argument("--rounding-rule", dest="rounding_rule", help='e.g. "0.05"')

    subparsers.add_parser("strategies", help="List pricing strategies")

    rounding_parser = subparsers.add_parser("rounding", help="Show rounding proposals for a price")
    rounding_parser.add_argument("price", help="Price to round")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "sample":
        return sample_cmd(args)
    elif args.command == "strategies":
        return strategies_cmd(args)
    elif args.command == "rounding":
        return rounding_cmd(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
