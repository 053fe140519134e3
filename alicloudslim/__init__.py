"""Thin clients for two Alibaba Cloud marketplace APIs.

Modules:
- wuliu: logistics tracking lookups (AppCode auth)
- market: marketplace metering, pricing and ordering (signed RPC)
"""

from .errors import AliCloudAPIError, WuliuAPIError, MarketAPIError
from .market import MarketClient
from .models import (
    Provider,
    Status,
    StatusItem,
    Product,
    ProductDetails,
    ProductOption,
    PricedOption,
)
from .wuliu import WuliuClient, delivery_status_text

__all__ = [
    "AliCloudAPIError",
    "WuliuAPIError",
    "MarketAPIError",
    "MarketClient",
    "WuliuClient",
    "delivery_status_text",
    "Provider",
    "Status",
    "StatusItem",
    "Product",
    "ProductDetails",
    "ProductOption",
    "PricedOption",
]
