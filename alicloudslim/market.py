"""
Client for the Alibaba Cloud marketplace billing/ordering RPC API.

Requests are signed with the standard RPC signature (HMAC-SHA1, version 1.0).
"""

from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
import json
import logging

import requests

from .config import (
    ALIYUN_ACCESS_KEY_ID,
    ALIYUN_ACCESS_KEY_SECRET,
    MARKET_API_URL,
    MARKET_API_VERSION,
    REQUEST_TIMEOUT_SECONDS,
)
from .errors import MarketAPIError
from .http import http_get, decode_json
from .models import (
    Product,
    ProductDetails,
    ProductOption,
    PricedOption,
    MeteringPage,
    PriceQuote,
)
from .sign import sign_params, random_string

logger = logging.getLogger(__name__)

PACKAGE_VERSION = "package_version"


def _commodity(**fields: Any) -> str:
    return json.dumps(fields, ensure_ascii=False, separators=(",", ":"))


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def extract_options(product: Dict[str, Any]) -> List[ProductOption]:
    """Collect every ``package_version`` value across all SKUs of a DescribeProduct body."""
    options: List[ProductOption] = []
    skus = (product.get("ProductSkus") or {}).get("ProductSku") or []
    for sku in skus:
        for module in (sku.get("Modules") or {}).get("Module") or []:
            if module.get("Code") != PACKAGE_VERSION:
                continue
            for prop in (module.get("Properties") or {}).get("Property") or []:
                if prop.get("Key") != PACKAGE_VERSION:
                    continue
                for value in (prop.get("PropertyValues") or {}).get("PropertyValue") or []:
                    options.append(ProductOption(
                        code=value.get("Value", ""),
                        name=value.get("DisplayName", ""),
                    ))
    return options


class MarketClient:
    """Marketplace client signing each request with an AccessKey pair."""

    def __init__(
        self,
        access_key_id: Optional[str] = None,
        access_key_secret: Optional[str] = None,
        *,
        endpoint: Optional[str] = None,
        version: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.access_key_id = access_key_id or ALIYUN_ACCESS_KEY_ID
        self._access_key_secret = access_key_secret or ALIYUN_ACCESS_KEY_SECRET
        self.endpoint = endpoint or MARKET_API_URL
        self.version = version or MARKET_API_VERSION
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT_SECONDS
        self.session = session

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key_id and self._access_key_secret)

    def signed_params(self, params: Dict[str, str]) -> Dict[str, str]:
        """Add the common parameters and ``Signature`` to ``params`` (a new dict is returned)."""
        signed = dict(params)
        signed.update({
            "Format": "json",
            "Version": self.version,
            "AccessKeyId": self.access_key_id,
            "SignatureMethod": "HMAC-SHA1",
            "Timestamp": _timestamp(),
            "SignatureVersion": "1.0",
            "SignatureNonce": random_string(64),
        })
        signed["Signature"] = sign_params(signed, self._access_key_secret)
        return signed

    def _request(self, params: Dict[str, str]) -> Dict[str, Any]:
        action = params.get("Action", "")
        resp = http_get(
            self.endpoint,
            params=self.signed_params(params),
            timeout=self.timeout,
            session=self.session,
        )
        if resp.status_code != 200:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            code = body.get("Code", "")
            message = body.get("Message", "")
            logger.debug("Market %s failed with HTTP %s: %s %s", action, resp.status_code, code, message)
            raise MarketAPIError(
                f"server responded status {resp.status_code} with code {code} and message {message} returned",
                status=resp.status_code,
                code=code,
            )
        return decode_json(resp)

    def get_products(self) -> List[Product]:
        """All metered API products, walking every page of DescribeApiMetering."""
        products: List[Product] = []
        page_num = 1
        while True:
            page: MeteringPage = self._request({
                "Action": "DescribeApiMetering",
                "type": "1",
                "pageNum": str(page_num),
            })
            if not page.get("Success"):
                code = page.get("Code", "")
                message = page.get("Message", "")
                logger.debug("Failed to get metering info: code %s, message %s", code, message)
                raise MarketAPIError(
                    f"failed to get metering info: code {code}, message {message} returned",
                    code=code,
                )
            items = page.get("Result") or []
            products.extend(
                Product(
                    id=item.get("ProductCode", ""),
                    name=item.get("ProductName", ""),
                    remaining=int(item.get("TotalQuota") or 0),
                    used=int(item.get("TotalUsage") or 0),
                    unit=item.get("Unit", ""),
                )
                for item in items
            )
            page_size = int(page.get("PageSize") or 0)
            count = int(page.get("Count") or 0)
            if not items or page_size <= 0 or page_num * page_size >= count:
                return products
            page_num += 1

    def get_product(self, id: str) -> ProductDetails:
        """Product description and its purchasable ``package_version`` options."""
        data = self._request({"Action": "DescribeProduct", "Code": id})
        return ProductDetails(
            id=data.get("Code", ""),
            name=data.get("Name", ""),
            description=data.get("ShortDescription", ""),
            options=extract_options(data),
        )

    def get_price(self, id: str, option: str) -> PricedOption:
        """Quote for buying ``option`` of product ``id``."""
        quote: PriceQuote = self._request({
            "Action": "DescribePrice",
            "OrderType": "INSTANCE_BUY",
            "Commodity": _commodity(
                components={PACKAGE_VERSION: option},
                productCode=id,
            ),
        })
        return PricedOption(
            id=id,
            code=option,
            duration=int(quote.get("Duration") or 0),
            cycle=quote.get("Cycle", ""),
            price="%.2f" % float(quote.get("TradePrice") or 0),
        )

    def create_order(self, option: PricedOption, **overrides: str) -> str:
        """
        Place an order for a priced option and return the vendor's OrderId.

        Keyword overrides replace request parameters, e.g. ``PaymentType="HAND"``
        or ``OrderType="INSTANCE_RENEW"``. Non-string values are ignored.
        """
        params = {
            "Action": "CreateOrder",
            "ClientToken": random_string(64),
            "OrderType": "INSTANCE_BUY",  # INSTANCE_BUY, INSTANCE_RENEW or INSTANCE_UPGRADE
            "PaymentType": "AUTO",  # AUTO or HAND
            "Commodity": _commodity(
                components={PACKAGE_VERSION: option.code},
                skuCode="prepay",
                duration=option.duration,
                pricingCycle=option.cycle,
                productCode=option.id,
            ),
        }
        for key, value in overrides.items():
            if isinstance(value, str):
                params[key] = value
        logger.debug("CreateOrder for %s/%s: %s", option.id, option.code, params)
        data = self._request(params)
        return data.get("OrderId", "")
