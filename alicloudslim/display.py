from typing import List, Optional
from datetime import datetime

from .models import Provider, Status, Product, ProductDetails, PricedOption


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def display_providers(providers: List[Provider]) -> None:
    if not providers:
        print("No providers found.")
        return
    print(f"{'Code':<20} {'Name':<30}")
    print("-" * 52)
    for provider in providers:
        print(f"{provider.code:<20} {provider.name:<30}")
    print(f"Total: {len(providers)} providers")


def display_status(status: Status) -> None:
    """
    Print a tracking report: header fields followed by the history, newest first
    as the vendor returns it.
    """
    print(f"\n=== {status.company_name or status.code} {status.number} ===")
    print(f"Status:       {status.status}")
    print(f"Updated:      {_fmt_time(status.updated_at)}")
    if status.time_elapsed:
        print(f"Elapsed:      {status.time_elapsed}")
    if status.company_phone:
        print(f"Carrier tel:  {status.company_phone}")
    if status.courier_name or status.courier_phone:
        print(f"Courier:      {status.courier_name} {status.courier_phone}".rstrip())
    print("-" * 80)
    if not status.items:
        print("No tracking history.")
        return
    for item in status.items:
        print(f"{_fmt_time(item.time):<20} {item.desc}")


def display_products(products: List[Product]) -> None:
    if not products:
        print("No products found.")
        return
    print(f"{'#':<3} {'ID':<20} {'Name':<40} {'Remaining':>10} {'Used':>10} {'Unit':<8}")
    print("-" * 96)
    for i, product in enumerate(products, 1):
        print(
            f"{i:<3} {product.id[:20]:<20} {product.name[:40]:<40} "
            f"{product.remaining:>10} {product.used:>10} {product.unit:<8}"
        )
    print(f"Total: {len(products)} products")


def display_product_details(details: ProductDetails) -> None:
    print(f"\n=== {details.name} ({details.id}) ===")
    if details.description:
        print(details.description)
    print("-" * 60)
    if not details.options:
        print("No purchasable options.")
        return
    for option in details.options:
        print(f"{option.code:<24} {option.name}")


def display_price(option: PricedOption) -> None:
    print(f"{option.id} / {option.code}: {option.price} per {option.duration} {option.cycle}")
