"""
Client for the Alibaba Cloud marketplace logistics lookup API ("wuliu").

Docs: https://market.aliyun.com/products/57126001/cmapi021863.html

Endpoints:
    - GET /getExpressList: all supported carriers
    - GET /exCompany?no=: carriers that could own a tracking number
    - GET /kdi?type=&no=: tracking status for a number
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Dict, Any
import logging
import threading

import requests

from .config import WULIU_APP_CODE, WULIU_API_URL, REQUEST_TIMEOUT_SECONDS
from .errors import WuliuAPIError
from .http import http_get, decode_json
from .models import Provider, Status, StatusItem, WuliuTraceResult

logger = logging.getLogger(__name__)

# Times returned by the vendor are China Standard Time
CHINA_TZ = timezone(timedelta(hours=8), "UTC+8")
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

DELIVERY_STATUS_TEXT: Dict[str, str] = {
    "0": "快递收件(揽件)",
    "1": "在途中",
    "2": "正在派件",
    "3": "已签收",
    "4": "派送失败",
    "5": "疑难件",
    "6": "退件签收",
}


def delivery_status_text(code: Any) -> str:
    """Display text for a ``deliverystatus`` code; unknown codes are returned as-is."""
    key = "" if code is None else str(code)
    return DELIVERY_STATUS_TEXT.get(key, key)


def parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value, TIME_FORMAT).replace(tzinfo=CHINA_TZ)
    except ValueError:
        logger.debug("Unparseable wuliu time %r", value)
        return None


class WuliuClient:
    """Logistics lookup client authenticated with a marketplace AppCode."""

    def __init__(
        self,
        app_code: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.app_code = app_code or WULIU_APP_CODE
        self.base_url = (base_url or WULIU_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT_SECONDS
        self.session = session
        self._providers: List[Provider] = []
        self._providers_lock = threading.Lock()

    def _request(self, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        resp = http_get(
            self.base_url + path,
            params=params,
            headers={"Authorization": "APPCODE " + self.app_code},
            timeout=self.timeout,
            session=self.session,
        )
        if resp.status_code >= 400:
            logger.warning(
                "Wuliu %s failed with HTTP %s: %s",
                path,
                resp.status_code,
                resp.headers.get("X-Ca-Error-Message", ""),
            )
        resp.raise_for_status()
        return decode_json(resp)

    @staticmethod
    def _check(data: Dict[str, Any], success: str, what: str) -> None:
        status = str(data.get("status", ""))
        if status != success:
            message = data.get("msg", "")
            logger.debug("Failed to get wuliu %s: status %s, message %s", what, status, message)
            raise WuliuAPIError(
                f"failed to get wuliu {what}: status {status}, message {message} returned",
                code=status,
            )

    def get_providers(self) -> List[Provider]:
        """All supported carriers sorted by code. The first non-empty list is memoized."""
        with self._providers_lock:
            if self._providers:
                return list(self._providers)
            data = self._request("/getExpressList")
            self._check(data, "200", "providers")
            result = data.get("result") or {}
            providers = sorted(
                (Provider(code=code, name=name) for code, name in result.items()),
                key=lambda p: p.code,
            )
            if providers:
                self._providers = providers
            return list(providers)

    def get_providers_for_number(self, no: str) -> List[Provider]:
        """Carriers that may own tracking number ``no``, in vendor order."""
        data = self._request("/exCompany", {"no": no})
        self._check(data, "0", "provider")
        return [
            Provider(code=item.get("type", ""), name=item.get("name", ""))
            for item in data.get("list") or []
        ]

    def get_status_for_number(self, code: str, no: str) -> Status:
        """Tracking status of ``no`` with carrier ``code``."""
        data = self._request("/kdi", {"type": code, "no": no})
        self._check(data, "0", "status")
        result: WuliuTraceResult = data.get("result") or {}
        items = [
            StatusItem(desc=entry.get("status", ""), time=parse_time(entry.get("time")))
            for entry in result.get("list") or []
        ]
        return Status(
            code=result.get("type", ""),
            number=result.get("number", ""),
            status=delivery_status_text(result.get("deliverystatus", "")),
            company_name=result.get("expName", ""),
            company_logo=result.get("logo", ""),
            company_phone=result.get("expPhone", ""),
            courier_name=result.get("courier", ""),
            courier_phone=result.get("courierPhone", ""),
            updated_at=parse_time(result.get("updateTime")),
            time_elapsed=result.get("takeTime", ""),
            items=items,
        )
