import argparse
import logging
from typing import Optional

import requests

from .config import REQUEST_TIMEOUT_SECONDS
from .display import (
    display_providers,
    display_status,
    display_products,
    display_product_details,
    display_price,
)
from .errors import AliCloudAPIError
from .market import MarketClient
from .printing import json_print, print_error
from .wuliu import WuliuClient

logger = logging.getLogger(__name__)


def _common_options(suppress: bool = False) -> argparse.ArgumentParser:
    # Subcommand copies use SUPPRESS so they don't overwrite values given before the service name
    def default(value):
        return argparse.SUPPRESS if suppress else value

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--timeout", type=float, default=default(REQUEST_TIMEOUT_SECONDS), help=f"HTTP timeout seconds (default: {REQUEST_TIMEOUT_SECONDS})")
    common.add_argument("--json", action="store_true", default=default(False), help="Print results as JSON")
    common.add_argument("--verbose", action="store_true", default=default(False), help="Log request details")
    return common


def _wuliu_options() -> argparse.ArgumentParser:
    opts = argparse.ArgumentParser(add_help=False, parents=[_common_options(suppress=True)])
    opts.add_argument("--app-code", type=str, help="Override WULIU_APP_CODE for this call")
    return opts


def _market_options() -> argparse.ArgumentParser:
    opts = argparse.ArgumentParser(add_help=False, parents=[_common_options(suppress=True)])
    opts.add_argument("--access-key-id", type=str, help="Override ALIYUN_ACCESS_KEY_ID for this call")
    opts.add_argument("--access-key-secret", type=str, help="Override ALIYUN_ACCESS_KEY_SECRET for this call")
    return opts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Query the Alibaba Cloud logistics and marketplace APIs",
        parents=[_common_options()],
    )
    subparsers = parser.add_subparsers(dest="service", required=True)

    # Wuliu
    wuliu_parser = subparsers.add_parser("wuliu", help="Logistics tracking lookups")
    wuliu_sub = wuliu_parser.add_subparsers(dest="command", required=True)
    wuliu_opts = _wuliu_options()
    wuliu_sub.add_parser("providers", parents=[wuliu_opts], help="List supported carriers")
    detect_parser = wuliu_sub.add_parser("detect", parents=[wuliu_opts], help="Detect carriers for a tracking number")
    detect_parser.add_argument("no", help="Tracking number")
    track_parser = wuliu_sub.add_parser("track", parents=[wuliu_opts], help="Show tracking status for a number")
    track_parser.add_argument("no", help="Tracking number")
    track_parser.add_argument("--code", type=str, help="Carrier code (detected when omitted)")

    # Market
    market_parser = subparsers.add_parser("market", help="Marketplace billing and ordering")
    market_sub = market_parser.add_subparsers(dest="command", required=True)
    market_opts = _market_options()
    market_sub.add_parser("products", parents=[market_opts], help="List metered API products")
    product_parser = market_sub.add_parser("product", parents=[market_opts], help="Show a product and its options")
    product_parser.add_argument("id", help="Product code")
    price_parser = market_sub.add_parser("price", parents=[market_opts], help="Quote a product option")
    price_parser.add_argument("id", help="Product code")
    price_parser.add_argument("option", help="package_version option code")
    order_parser = market_sub.add_parser("order", parents=[market_opts], help="Buy a product option")
    order_parser.add_argument("id", help="Product code")
    order_parser.add_argument("option", help="package_version option code")
    order_parser.add_argument("--payment-type", choices=["AUTO", "HAND"], default="AUTO", help="AUTO pays from balance, HAND leaves the order unpaid")
    order_parser.add_argument("--yes", action="store_true", help="Confirm placing the order")

    return parser


def _run_wuliu(args) -> int:
    client = WuliuClient(getattr(args, "app_code", None), timeout=args.timeout)
    if not client.app_code:
        print_error("WULIU_APP_CODE is not set (use --app-code or .env)")
        return 2

    if args.command == "providers":
        providers = client.get_providers()
        if args.json:
            json_print(providers)
        else:
            display_providers(providers)
        return 0

    if args.command == "detect":
        providers = client.get_providers_for_number(args.no)
        if args.json:
            json_print(providers)
        else:
            display_providers(providers)
        return 0

    if args.command == "track":
        code = args.code
        if not code:
            candidates = client.get_providers_for_number(args.no)
            if not candidates:
                print_error(f"No carrier found for {args.no}")
                return 1
            code = candidates[0].code
            logger.info("Detected carrier %s (%s) for %s", code, candidates[0].name, args.no)
        status = client.get_status_for_number(code, args.no)
        if args.json:
            json_print(status)
        else:
            display_status(status)
        return 0

    return 2


def _run_market(args) -> int:
    client = MarketClient(
        getattr(args, "access_key_id", None),
        getattr(args, "access_key_secret", None),
        timeout=args.timeout,
    )
    if not client.has_credentials:
        print_error("ALIYUN_ACCESS_KEY_ID / ALIYUN_ACCESS_KEY_SECRET are not set")
        return 2

    if args.command == "products":
        products = client.get_products()
        if args.json:
            json_print(products)
        else:
            display_products(products)
        return 0

    if args.command == "product":
        details = client.get_product(args.id)
        if args.json:
            json_print(details)
        else:
            display_product_details(details)
        return 0

    if args.command == "price":
        option = client.get_price(args.id, args.option)
        if args.json:
            json_print(option)
        else:
            display_price(option)
        return 0

    if args.command == "order":
        option = client.get_price(args.id, args.option)
        if not args.json:
            display_price(option)
        if not args.yes:
            print_error("Refusing to place an order without --yes")
            return 1
        order_id = client.create_order(option, PaymentType=args.payment_type)
        if args.json:
            json_print({"OrderId": order_id})
        else:
            print(order_id)
        return 0

    return 2


def run(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # urllib3 DEBUG lines carry the signed query string
    logging.getLogger("urllib3").setLevel(logging.INFO)

    try:
        if args.service == "wuliu":
            return _run_wuliu(args)
        return _run_market(args)
    except AliCloudAPIError as exc:
        print_error(str(exc))
        return 1
    except requests.Timeout:
        print_error(f"Request timed out after {args.timeout}s")
        return 1
    except ValueError as exc:
        print_error(f"Failed to parse JSON from response: {exc}")
        return 1
    except requests.RequestException as exc:
        print_error(f"Network error: {exc}")
        return 1
