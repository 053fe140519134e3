from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import TypedDict, NotRequired, List, Dict, Any, Optional


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# Public records


@dataclass(frozen=True)
class Provider:
    """A logistics carrier."""
    code: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StatusItem:
    desc: str
    time: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        return {"desc": self.desc, "time": _isoformat(self.time)}


@dataclass(frozen=True)
class Status:
    """Tracking result for one shipment."""
    code: str
    number: str
    status: str
    company_name: str = ""
    company_logo: str = ""
    company_phone: str = ""
    courier_name: str = ""
    courier_phone: str = ""
    updated_at: Optional[datetime] = None
    time_elapsed: str = ""
    items: List[StatusItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["updated_at"] = _isoformat(self.updated_at)
        data["items"] = [item.to_dict() for item in self.items]
        return data


@dataclass(frozen=True)
class Product:
    """A metered marketplace product."""
    id: str
    name: str
    remaining: int
    used: int
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProductOption:
    code: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProductDetails:
    id: str
    name: str
    description: str
    options: List[ProductOption] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PricedOption:
    """A price quote for one purchasable option of a product."""
    id: str
    code: str
    duration: int
    cycle: str
    price: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Raw response shapes


class WuliuTraceEntry(TypedDict, total=False):
    time: str
    status: str


class WuliuTraceResult(TypedDict, total=False):
    number: str
    type: str
    list: List[WuliuTraceEntry]
    deliverystatus: str
    issign: NotRequired[str]
    expName: str
    expSite: NotRequired[str]
    expPhone: str
    courier: str
    courierPhone: str
    updateTime: str
    takeTime: str
    logo: str


class MeteringItem(TypedDict, total=False):
    ProductName: str
    AliyunPk: int
    ProductCode: str
    TotalQuota: int
    TotalUsage: int
    Unit: str


class MeteringPage(TypedDict, total=False):
    PageSize: int
    PageNumber: int
    Count: int
    Message: str
    Code: str
    Success: bool
    Fatal: NotRequired[bool]
    Version: NotRequired[str]
    Result: List[MeteringItem]


class PriceQuote(TypedDict, total=False):
    ProductCode: str
    TradePrice: float
    OriginalPrice: float
    DiscountPrice: float
    Currency: str
    Duration: int
    Cycle: str
