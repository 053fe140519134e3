"""
Exceptions raised when a vendor API reports a failure.

Transport problems (``requests.RequestException``) and undecodable bodies
(``ValueError``) are not wrapped; they reach the caller unchanged.
"""

from typing import Any, Dict, Optional


class AliCloudAPIError(Exception):
    """Base exception for failures reported by an Alibaba Cloud API."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.status:
            parts.append(f"(Status: {self.status})")
        if self.code:
            parts.append(f"(Code: {self.code})")
        return " ".join(parts)


class WuliuAPIError(AliCloudAPIError):
    """The logistics API answered with a non-success ``status`` field."""


class MarketAPIError(AliCloudAPIError):
    """The marketplace API answered with an error status or ``Success: false``."""
