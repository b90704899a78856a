"""Error types reported by the PCS, pan and dlink web APIs."""

from __future__ import annotations

import enum
import json
from typing import Any

STR_SUCCESS = "操作成功"
STR_INTERNAL_ERROR = "内部错误"
STR_REMOTE_ERROR = "远端服务器返回错误"
STR_NET_ERROR = "网络错误"
STR_JSON_PARSE_ERROR = "json 数据解析失败"

_PAN_ERRORS = {
    0: STR_SUCCESS,
    -1: "由于您分享了违反相关法律法规的文件，分享功能已被禁用，之前分享出去的文件不受影响。",
    -2: "用户不存在,请刷新页面后重试",
    -3: "文件不存在,请刷新页面后重试",
    -4: "登录信息有误，请重新登录试试",
    -5: "host_key和user_key无效",
    -6: "请重新登录",
    -7: "该分享已删除或已取消",
    -8: "该分享已经过期",
    -9: "文件不存在",
    -10: "分享外链已经达到最大上限100000条，不能再次分享",
    -11: "验证cookie无效",
    -12: "访问密码错误",
    -14: "对不起，短信分享每天限制20条，你今天已经分享完，请明天再来分享吧！",
    -15: "对不起，邮件分享每天限制20封，你今天已经分享完，请明天再来分享吧！",
    -16: "对不起，该文件已经限制分享！",
    -17: "文件分享超过限制",
    -19: "需要输入验证码",
    -21: "分享已取消或分享信息无效",
    -30: "文件已存在",
    -31: "文件保存失败",
    -33: "一次支持操作999个，减点试试吧",
    -62: "可能需要输入验证码",
    -70: "你分享的文件中包含病毒或疑似病毒，为了你和他人的数据安全，换个文件分享吧",
    2: "参数错误",
    3: "未登录或帐号无效",
    4: "存储好像出问题了，请稍候再试",
    105: "啊哦，链接错误没找到文件，请打开正确的分享链接",
    108: "文件名有敏感词，优化一下吧",
    110: "分享次数超出限制，可以到“我的分享”中查看已分享的文件链接",
    112: "页面已过期，请刷新后重试",
    113: "签名错误",
    114: "当前任务不存在，保存失败",
    115: "该文件禁止分享",
    132: "您的帐号可能存在安全风险，为了确保为您本人操作，请先进行安全验证。",
}


class ErrType(enum.IntEnum):
    """Category of a failure."""

    NO_ERROR = 0
    INTERNAL = 1
    REMOTE = 2
    NET = 3
    JSON_PARSE = 4
    OTHERS = 5


def find_pan_err(errno: int) -> str:
    """Return the message for a pan web API error number."""
    return _PAN_ERRORS.get(errno, "未知错误")


def find_pcs_err(err_code: int, err_msg: str) -> tuple[int, str]:
    """Return the code and a readable message for a PCS API error."""
    if err_code == 0:
        return err_code, ""
    if err_code == 31045:
        return err_code, "操作失败, 可能百度帐号登录状态过期, 请尝试重新登录, 消息: " + err_msg
    if err_code == 31066:
        return err_code, "文件或目录不存在"
    if err_code == 31079:
        return err_code, "秒传文件失败"
    return err_code, err_msg


def _int_field(obj: dict, key: str, default: int) -> int:
    value = obj.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field {key!r} is not an integer: {value!r}")
    return value


def _str_field(obj: dict, key: str, default: str) -> str:
    value = obj.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} is not a string: {value!r}")
    return value


class BaiduError(Exception):
    """Failure of one API operation."""

    def __init__(self, operation: str = "", err_type: ErrType = ErrType.NO_ERROR, err: Any = None):
        super().__init__(operation)
        self.operation = operation
        self.err_type = ErrType(err_type)
        self.err = err

    def set_json_error(self, err: Any) -> None:
        self.err_type = ErrType.JSON_PARSE
        self.err = err

    def set_net_error(self, err: Any) -> None:
        self.err_type = ErrType.NET
        self.err = err

    def set_remote_error(self) -> None:
        self.err_type = ErrType.REMOTE

    @property
    def remote_err_code(self) -> int:
        return 0

    @property
    def remote_err_msg(self) -> str:
        return ""

    def _load_json(self, obj: dict) -> None:
        """Take the remote error fields out of a decoded response."""

    def __str__(self) -> str:
        op = self.operation
        if not op:
            return str(self.err) if self.err is not None else STR_SUCCESS

        kind = self.err_type
        if kind is ErrType.INTERNAL:
            return f"{op}: {STR_INTERNAL_ERROR}, {self.err}"
        if kind is ErrType.JSON_PARSE:
            return f"{op}: {STR_JSON_PARSE_ERROR}, {self.err}"
        if kind is ErrType.NET:
            return f"{op}: {STR_NET_ERROR}, {self.err}"
        if kind is ErrType.REMOTE:
            code = self.remote_err_code
            if code == 0:
                return f"{op}: {STR_SUCCESS}"
            return f"{op}: 遇到错误, {STR_REMOTE_ERROR}, 代码: {code}, 消息: {self.remote_err_msg}"
        if kind is ErrType.OTHERS:
            if self.err is None:
                return f"{op}: {STR_SUCCESS}"
            return f"{op}, 遇到错误, {self.err}"
        return f"{op}: {STR_SUCCESS}"


class PCSError(BaiduError):
    """Error reported by the PCS REST API."""

    def __init__(
        self,
        operation: str = "",
        err_type: ErrType = ErrType.NO_ERROR,
        err: Any = None,
        error_code: int = 0,
        error_msg: str = "",
    ):
        super().__init__(operation, err_type, err)
        self.error_code = error_code
        self.error_msg = error_msg

    @property
    def remote_err_code(self) -> int:
        return self.error_code

    @property
    def remote_err_msg(self) -> str:
        return find_pcs_err(self.error_code, self.error_msg)[1]

    def _load_json(self, obj: dict) -> None:
        self.error_code = _int_field(obj, "error_code", self.error_code)
        self.error_msg = _str_field(obj, "error_msg", self.error_msg)


class PanError(BaiduError):
    """Error reported by the pan web API."""

    def __init__(
        self,
        operation: str = "",
        err_type: ErrType = ErrType.NO_ERROR,
        err: Any = None,
        errno: int = 0,
    ):
        super().__init__(operation, err_type, err)
        self.errno = errno

    @property
    def remote_err_code(self) -> int:
        return self.errno

    @property
    def remote_err_msg(self) -> str:
        return find_pan_err(self.errno)

    def _load_json(self, obj: dict) -> None:
        self.errno = _int_field(obj, "errno", self.errno)


class DlinkError(BaiduError):
    """Error reported by the dlink server."""

    def __init__(
        self,
        operation: str = "",
        err_type: ErrType = ErrType.NO_ERROR,
        err: Any = None,
        errno: int = 0,
        msg: str = "",
    ):
        super().__init__(operation, err_type, err)
        self.errno = errno
        self.msg = msg

    @property
    def remote_err_code(self) -> int:
        return self.errno

    @property
    def remote_err_msg(self) -> str:
        return self.msg

    def _load_json(self, obj: dict) -> None:
        self.errno = _int_field(obj, "errno", self.errno)
        self.msg = _str_field(obj, "msg", self.msg)


def handle_json_parse(error: BaiduError, data: Any) -> dict:
    """Decode a JSON response and return it.

    ``data`` is bytes, text or a readable object. The remote error fields
    are stored on ``error``, which is raised when decoding fails or the
    server reports a non-zero error code.
    """
    try:
        if hasattr(data, "read"):
            data = data.read()
        obj = json.loads(data)
        if obj is None:
            obj = {}
        if not isinstance(obj, dict):
            raise TypeError(f"expected a JSON object, got {type(obj).__name__}")
        error._load_json(obj)
    except (ValueError, TypeError) as exc:
        error.set_json_error(exc)
        raise error from exc

    if error.remote_err_code != 0:
        error.set_remote_error()
        raise error
    return obj


def decode_pcs_json_error(operation: str, data: Any) -> dict:
    """Check a PCS API response for an error, raising PCSError."""
    return handle_json_parse(PCSError(operation), data)


def decode_pan_json_error(operation: str, data: Any) -> dict:
    """Check a pan web API response for an error, raising PanError."""
    return handle_json_parse(PanError(operation), data)