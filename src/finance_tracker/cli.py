"""Command-line interface for Finance Tracker."""

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path

from finance_tracker import __version__
from finance_tracker.config import Settings
from finance_tracker.container import Container
from finance_tracker.domain.currency import (
    CURRENCY_NAMES,
    CURRENCY_SYMBOLS,
    SUPPORTED_CURRENCIES,
    CurrencyCode,
)
from finance_tracker.logging_config import configure_logging
from finance_tracker.services.currency import format_currency
from finance_tracker.services.display_currency import RATES_UNAVAILABLE_MESSAGE

CURRENCY_CHOICES = [code.value for code in SUPPORTED_CURRENCIES]


def build_container(args: argparse.Namespace) -> Container:
    """Create a container, honouring the --cache override."""
    if args.cache:
        return Container(Settings(rate_cache_path=Path(args.cache)))
    return Container()


def cmd_version(args: argparse.Namespace, container: Container) -> int:
    """Show version."""
    print(f"finance-tracker {__version__}")
    return 0


def cmd_currencies(args: argparse.Namespace, container: Container) -> int:
    """List supported currencies."""
    for code in SUPPORTED_CURRENCIES:
        print(f"  {code.value}  {CURRENCY_SYMBOLS[code]:<3} {CURRENCY_NAMES[code]}")
    return 0


def cmd_rates(args: argparse.Namespace, container: Container) -> int:
    """Fetch (or reuse cached) exchange rates for a base currency."""
    outcome = container.currency_service.fetch_rates_with_status(args.base)

    print(f"Exchange rates (base {args.base}, source: {outcome.source.value}):")
    print("-" * 50)
    for code in SUPPORTED_CURRENCIES:
        if code in outcome.rates:
            print(f"  {code.value}: {outcome.rates[code]:.6f}")
    if outcome.degraded:
        print(RATES_UNAVAILABLE_MESSAGE)
    return 0


def cmd_convert(args: argparse.Namespace, container: Container) -> int:
    """Convert an amount between currencies."""
    service = container.currency_service
    base = args.base or args.to_currency
    outcome = service.fetch_rates_with_status(base)

    converted = service.convert(
        args.amount, args.from_currency, args.to_currency, outcome.rates
    )
    print(
        f"{format_currency(args.amount, args.from_currency)} = "
        f"{format_currency(converted, args.to_currency)}"
    )
    if outcome.degraded:
        print(RATES_UNAVAILABLE_MESSAGE)
    return 0


def cmd_format(args: argparse.Namespace, container: Container) -> int:
    """Format an amount in a currency."""
    print(format_currency(args.amount, args.currency))
    return 0


def cmd_cache_show(args: argparse.Namespace, container: Container) -> int:
    """Show the cached exchange rate table."""
    cached = container.currency_service.get_cached_rates()
    if cached is None:
        print("No cached exchange rates")
        return 0

    fetched_at = datetime.fromtimestamp(cached.timestamp / 1000, tz=UTC)
    print(f"Cached exchange rates (base {cached.base_currency.value})")
    print(f"  Fetched: {fetched_at.isoformat(timespec='seconds')}")
    print("-" * 50)
    for code, rate in cached.rates.items():
        print(f"  {code.value}: {rate:.6f}")
    return 0


def cmd_cache_clear(args: argparse.Namespace, container: Container) -> int:
    """Remove the cached exchange rate table."""
    container.currency_service.clear_cache()
    print("Exchange rate cache cleared")
    return 0


def main(argv: list[str] | None = None, container: Container | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="ftrack",
        description="Finance Tracker - multi-currency conversion and exchange rate cache",
    )
    parser.add_argument(
        "--cache",
        "-c",
        help="Path to the SQLite exchange rate cache",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    currencies_parser = subparsers.add_parser(
        "currencies", help="List supported currencies"
    )
    currencies_parser.set_defaults(func=cmd_currencies)

    rates_parser = subparsers.add_parser("rates", help="Show exchange rates")
    rates_parser.add_argument(
        "--base",
        "-b",
        type=str.upper,
        choices=CURRENCY_CHOICES,
        default=CurrencyCode.USD.value,
        help="Base currency (default: USD)",
    )
    rates_parser.set_defaults(func=cmd_rates)

    convert_parser = subparsers.add_parser("convert", help="Convert an amount")
    convert_parser.add_argument("amount", type=float, help="Amount to convert")
    convert_parser.add_argument(
        "--from",
        dest="from_currency",
        type=str.upper,
        choices=CURRENCY_CHOICES,
        required=True,
        help="Currency the amount is denominated in",
    )
    convert_parser.add_argument(
        "--to",
        dest="to_currency",
        type=str.upper,
        choices=CURRENCY_CHOICES,
        required=True,
        help="Currency to convert into",
    )
    convert_parser.add_argument(
        "--base",
        type=str.upper,
        choices=CURRENCY_CHOICES,
        default=None,
        help="Rate table base (default: the target currency)",
    )
    convert_parser.set_defaults(func=cmd_convert)

    format_parser = subparsers.add_parser("format", help="Format an amount")
    format_parser.add_argument("amount", type=float, help="Amount to format")
    format_parser.add_argument(
        "currency", type=str.upper, choices=CURRENCY_CHOICES, help="Currency code"
    )
    format_parser.set_defaults(func=cmd_format)

    cache_parser = subparsers.add_parser("cache", help="Inspect the rate cache")
    cache_subparsers = cache_parser.add_subparsers(dest="cache_command")
    cache_show_parser = cache_subparsers.add_parser("show", help="Show cached rates")
    cache_show_parser.set_defaults(func=cmd_cache_show)
    cache_clear_parser = cache_subparsers.add_parser("clear", help="Clear cached rates")
    cache_clear_parser.set_defaults(func=cmd_cache_clear)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if not hasattr(args, "func"):
        if args.command == "cache":
            cache_parser.print_help()
        return 0

    if container is None:
        container = build_container(args)
    configure_logging(container.settings)

    try:
        return args.func(args, container)
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
