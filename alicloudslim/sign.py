import base64
import hashlib
import hmac
import secrets
from typing import Mapping
from urllib.parse import quote

_ALPHANUM = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def percent_encode(value: str) -> str:
    # RFC 3986: only A-Z a-z 0-9 - _ . ~ stay literal, space becomes %20
    return quote(str(value), safe="~")


def canonical_query_string(params: Mapping[str, str]) -> str:
    keys = sorted(key for key in params if key != "Signature")
    return "&".join(f"{percent_encode(key)}={percent_encode(params[key])}" for key in keys)


def string_to_sign(params: Mapping[str, str], method: str = "GET") -> str:
    return "&".join([
        method,
        percent_encode("/"),
        percent_encode(canonical_query_string(params)),
    ])


def hmac_sha1_sign(secret: str, message: str) -> str:
    key = (secret + "&").encode("utf-8")
    digest = hmac.new(key, message.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def sign_params(params: Mapping[str, str], secret: str, method: str = "GET") -> str:
    """Signature for an RPC-style request (SignatureVersion 1.0)."""
    return hmac_sha1_sign(secret, string_to_sign(params, method))


def random_string(n: int) -> str:
    return "".join(secrets.choice(_ALPHANUM) for _ in range(n))
