"""Signature needed by the pan home download API."""

from __future__ import annotations

import base64
import itertools
import re
from dataclasses import dataclass

import requests

from .expiry import Expires

OPERATION_SIGNATURE = "signature"
PAN_HOME_URL = "https://pan.baidu.com/disk/home"
ANDROID_USER_AGENT = "Android"
SIGN_TTL = 3600.0

_SIGN_INFO_RE = re.compile(rb'"sign1":"(.*?)"[\s\S]*"sign3":"(.*?)","timestamp":(\d*?),')


class PanHomeError(Exception):
    """The pan home page could not provide signing data."""


class CookieInvalidError(PanHomeError):
    def __init__(self):
        super().__init__("cookie is invalid")


class UnknownLocationError(PanHomeError):
    def __init__(self):
        super().__init__("unknown location")


class PanHomeMatchError(PanHomeError):
    def __init__(self):
        super().__init__("网盘首页数据匹配出错")


@dataclass(frozen=True)
class SignResult:
    """A signature and the timestamp it belongs to."""

    sign: str
    timestamp: str


def sign2(key: str, data: str) -> bytes:
    """Encrypt ``data`` with the RC4-style stream keyed by ``key``."""
    if not key:
        return bytes(len(data))

    p = list(range(256))
    u = 0
    for q, code in zip(range(256), itertools.cycle(ord(c) for c in key)):
        u = (u + p[q] + code) % 256
        p[q], p[u] = p[u], p[q]

    out = bytearray()
    i = u = 0
    for ch in data:
        i = (i + 1) % 256
        u = (u + p[i]) % 256
        p[i], p[u] = p[u], p[i]
        k = p[(p[i] + p[u]) % 256]
        out.append((ord(ch) ^ k) & 0xFF)
    return bytes(out)


class PanHome:
    """Reads signing data from the pan home page and caches the signature."""

    def __init__(self, session: requests.Session | None = None):
        self.session = session if session is not None else requests.Session()
        self.sign1 = ""
        self.sign3 = ""
        self.timestamp = ""
        self._sign_result: SignResult | None = None
        self._sign_expires: Expires | None = None

    def _fetch_sign_info(self) -> None:
        resp = self.session.get(
            PAN_HOME_URL,
            headers={"User-Agent": ANDROID_USER_AGENT},
            allow_redirects=False,
        )
        with resp:
            location = resp.headers.get("Location", "")
            if location == "/":
                raise CookieInvalidError()
            if location:
                raise UnknownLocationError()

            match = _SIGN_INFO_RE.search(resp.content)
            if match is None:
                raise PanHomeMatchError()

        sign1, sign3, timestamp = (g.decode("utf-8", errors="replace") for g in match.groups())
        self.sign1, self.sign3, self.timestamp = sign1, sign3, timestamp

    def signature(self) -> SignResult:
        """Fetch fresh signing data and compute the signature."""
        self._fetch_sign_info()
        signed = base64.b64encode(sign2(self.sign3, self.sign1)).decode("ascii")
        return SignResult(sign=signed, timestamp=self.timestamp)

    def cache_signature(self) -> SignResult:
        """Return the cached signature, computing a new one once it expires."""
        if self._sign_expires is None or self._sign_expires.is_expired() or self._sign_result is None:
            self._sign_result = self.signature()
            self._sign_expires = Expires(SIGN_TTL)
        return self._sign_result

    def set_sign_expires(self) -> None:
        """Apply the expiry override to the cached signature, if any."""
        if self._sign_expires is not None:
            self._sign_expires.set_expires(True)