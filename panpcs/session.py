"""HTTP session for the PCS and pan web APIs."""

from __future__ import annotations

import enum
import logging
from typing import Any, Iterator
from urllib.parse import urlencode

import requests

from .common import get_http_scheme
from .errors import BaiduError, ErrType, PanError, PCSError, handle_json_parse
from .expiry import CacheMap
from .panhome import PanHome

PCS_BAIDU_COM = "pcs.baidu.com"
PAN_BAIDU_COM = "pan.baidu.com"
YUN_BAIDU_COM = "yun.baidu.com"
PAN_APP_ID = "250528"
NETDISK_UA = "netdisk;8.12.9;;android-android;7.0;JSbridge3.0.0"
COOKIE_DOMAIN = ".baidu.com"

NETDISK_UA_HEADER = {"User-Agent": NETDISK_UA}
FORM_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "User-Agent": NETDISK_UA,
}

_log = logging.getLogger("panpcs")


class Operation(str, enum.Enum):
    """Names of the API operations, used in error messages."""

    GET_UK = "获取UK"
    QUOTA_INFO = "获取当前用户空间配额信息"
    FILES_DIRECTORIES_META = "获取文件/目录的元信息"
    FILES_DIRECTORIES_LIST = "获取目录下的文件列表"
    SEARCH = "搜索"
    REMOVE = "删除文件/目录"
    MKDIR = "创建目录"
    RENAME = "重命名文件/目录"
    COPY = "拷贝文件/目录"
    MOVE = "移动文件/目录"
    RAPID_UPLOAD = "秒传文件"
    UPLOAD = "上传单个文件"
    UPLOAD_TMP_FILE = "分片上传—文件分片及上传"
    UPLOAD_CREATE_SUPER_FILE = "分片上传—合并分片文件"
    UPLOAD_PRECREATE = "分片上传—Precreate"
    UPLOAD_SUPERFILE2 = "分片上传—Superfile2"
    DOWNLOAD_FILE = "下载单个文件"
    DOWNLOAD_STREAM_FILE = "下载流式文件"
    LOCATE_DOWNLOAD = "获取下载链接"
    LOCATE_PAN_API_DOWNLOAD = "获取下载链接2"
    CLOUD_DL_ADD_TASK = "添加离线下载任务"
    CLOUD_DL_QUERY_TASK = "精确查询离线下载任务"
    CLOUD_DL_LIST_TASK = "查询离线下载任务列表"
    CLOUD_DL_CANCEL_TASK = "取消离线下载任务"
    CLOUD_DL_DELETE_TASK = "删除离线下载任务"
    CLOUD_DL_CLEAR_TASK = "清空离线下载任务记录"
    SHARE_SET = "创建分享链接"
    SHARE_CANCEL = "取消分享"
    SHARE_LIST = "列出分享列表"
    RECYCLE_LIST = "列出回收站文件列表"
    RECYCLE_RESTORE = "还原回收站文件或目录"
    RECYCLE_DELETE = "删除回收站文件或目录"
    RECYCLE_CLEAR = "清空回收站"
    EXPORT_FILE_INFO = "导出文件信息"
    GET_RAPID_UPLOAD_INFO = "获取文件秒传信息"
    FIX_MD5 = "修复文件md5"
    MATCH_PATH_BY_SHELL_PATTERN = "通配符匹配文件路径"

    def __str__(self) -> str:
        return self.value


def _parse_cookie_str(cookie_str: str) -> Iterator[tuple[str, str]]:
    for part in cookie_str.split(";"):
        name, sep, value = part.strip().partition("=")
        name = name.strip()
        if name and sep:
            yield name, value.strip()


def _encode_query(params: dict[str, str]) -> str:
    return urlencode(sorted(params.items()))


class PCSSession:
    """Account credentials, HTTP session and URL building for the APIs."""

    def __init__(self, app_id: int, session: requests.Session | None = None):
        self.app_id = app_id
        self.https = False
        self.session = session if session is not None else requests.Session()
        self.cache_map = CacheMap()
        self._pan_home: PanHome | None = None

    @classmethod
    def from_bduss(cls, app_id: int, bduss: str) -> "PCSSession":
        """Create a session logged in with a BDUSS cookie."""
        session = requests.Session()
        session.cookies.set("BDUSS", bduss, domain=COOKIE_DOMAIN)
        return cls(app_id, session)

    @classmethod
    def from_cookie_string(cls, app_id: int, cookie_str: str) -> "PCSSession":
        """Create a session from a ``name=value; name=value`` cookie string."""
        session = requests.Session()
        for name, value in _parse_cookie_str(cookie_str):
            session.cookies.set(name, value, domain=COOKIE_DOMAIN)
        return cls(app_id, session)

    @property
    def pan_home(self) -> PanHome:
        if self._pan_home is None:
            self._pan_home = PanHome(self.session)
        return self._pan_home

    def set_stoken(self, stoken: str) -> None:
        self.session.cookies.set("STOKEN", stoken, domain=COOKIE_DOMAIN)

    def set_user_agent(self, ua: str) -> None:
        self.session.headers["User-Agent"] = ua

    @property
    def url(self) -> str:
        """Base URL of the PCS API."""
        return f"{get_http_scheme(self.https)}://{PCS_BAIDU_COM}"

    @property
    def scheme(self) -> str:
        return get_http_scheme(self.https)

    def _pcs_url(self, sub_path: str, method: str, params: dict[str, str] | None = None) -> str:
        query = {"app_id": str(self.app_id), "method": method, **(params or {})}
        return f"{self.url}/rest/2.0/pcs/{sub_path}?{_encode_query(query)}"

    def _pcs_url2(self, sub_path: str, method: str, params: dict[str, str] | None = None) -> str:
        query = {"app_id": PAN_APP_ID, "method": method, **(params or {})}
        return f"{self.scheme}://{PAN_BAIDU_COM}/rest/2.0/{sub_path}?{_encode_query(query)}"

    def _pan_url(self, sub_path: str, params: dict[str, str] | None = None) -> str:
        url = f"{self.scheme}://{PAN_BAIDU_COM}/api/{sub_path}"
        if params is not None:
            url += "?" + _encode_query(params)
        return url

    def _send(
        self,
        operation: Operation | str,
        method: str,
        url: str,
        *,
        error: BaiduError | None = None,
        data: Any = None,
        files: Any = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """Perform one request and return its body, raising on network failure."""
        err = error if error is not None else PCSError(str(operation))
        _log.debug("%s URL: %s", operation, url)
        try:
            with self.session.request(
                method, url, data=data, files=files, headers=headers
            ) as resp:
                return resp.content
        except requests.RequestException as exc:
            err.set_net_error(exc)
            raise err from exc

    def _post_param(
        self,
        operation: Operation | str,
        url: str,
        payload: str,
        *,
        field: str = "param",
        error: BaiduError | None = None,
    ) -> bytes:
        """POST ``payload`` as a multipart form field."""
        return self._send(
            operation, "POST", url, error=error, files={field: (None, payload.encode("utf-8"))}
        )

    @staticmethod
    def _check_status(operation: Operation | str, resp: requests.Response) -> None:
        """Raise a network error for 4xx and 5xx responses."""
        if resp.status_code // 100 in (4, 5):
            resp.close()
            err = PCSError(str(operation))
            err.set_net_error(f"http 响应错误, {resp.status_code} {resp.reason}")
            raise err

    def uk(self) -> int:
        """Return the user's UK identifier."""
        op = str(Operation.GET_UK)
        url = f"{self.scheme}://{PAN_BAIDU_COM}/api/user/getinfo?need_selfinfo=1"
        body = self._send(op, "GET", url, error=PanError(op), headers=NETDISK_UA_HEADER)

        err = PanError(op)
        data = handle_json_parse(err, body)
        records = data.get("records") or []
        if not isinstance(records, list) or len(records) != 1:
            err.err_type = ErrType.OTHERS
            err.err = ValueError("Unknown remote data")
            raise err

        uk = records[0].get("uk", 0) if isinstance(records[0], dict) else None
        if isinstance(uk, bool) or not isinstance(uk, int):
            err.set_json_error(TypeError(f"uk is not an integer: {uk!r}"))
            raise err
        return uk