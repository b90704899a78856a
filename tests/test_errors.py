import io

import pytest

from panpcs.errors import (
    STR_SUCCESS,
    DlinkError,
    ErrType,
    PanError,
    PCSError,
    decode_pan_json_error,
    decode_pcs_json_error,
    find_pan_err,
    find_pcs_err,
    handle_json_parse,
)


def test_find_pan_err_known_codes():
    assert find_pan_err(0) == "操作成功"
    assert find_pan_err(112) == "页面已过期，请刷新后重试"
    assert find_pan_err(-9) == "文件不存在"


def test_find_pan_err_unknown_code():
    assert find_pan_err(424242) == "未知错误"


def test_find_pcs_err():
    assert find_pcs_err(0, "ignored") == (0, "")
    assert find_pcs_err(31066, "file does not exist") == (31066, "文件或目录不存在")
    assert find_pcs_err(31079, "md5") == (31079, "秒传文件失败")
    assert find_pcs_err(777, "raw message") == (777, "raw message")


def test_find_pcs_err_user_not_exists_keeps_message():
    code, msg = find_pcs_err(31045, "user not exists")
    assert code == 31045
    assert msg.endswith("user not exists")


def test_handle_json_parse_success_returns_object():
    result = handle_json_parse(PCSError("op"), b'{"quota": 10, "used": 3}')
    assert result == {"quota": 10, "used": 3}


def test_handle_json_parse_accepts_stream():
    result = handle_json_parse(PanError("op"), io.BytesIO(b'{"errno": 0, "list": []}'))
    assert result["list"] == []


def test_handle_json_parse_remote_error():
    with pytest.raises(PCSError) as info:
        handle_json_parse(PCSError("op"), '{"error_code":31066,"error_msg":"file does not exist"}')
    err = info.value
    assert err.err_type is ErrType.REMOTE
    assert err.remote_err_code == 31066
    assert str(err) == "op: 遇到错误, 远端服务器返回错误, 代码: 31066, 消息: 文件或目录不存在"


def test_handle_json_parse_invalid_json():
    with pytest.raises(PCSError) as info:
        handle_json_parse(PCSError("op"), b"not json")
    assert info.value.err_type is ErrType.JSON_PARSE
    assert str(info.value).startswith("op: json 数据解析失败, ")


def test_handle_json_parse_wrong_field_type():
    with pytest.raises(PanError) as info:
        handle_json_parse(PanError("op"), '{"errno": "x"}')
    assert info.value.err_type is ErrType.JSON_PARSE


def test_decode_pan_json_error():
    with pytest.raises(PanError) as info:
        decode_pan_json_error("op", '{"errno": -9}')
    assert info.value.remote_err_msg == "文件不存在"
    assert info.value.operation == "op"


def test_decode_pcs_json_error_no_error():
    assert decode_pcs_json_error("op", "{}") == {}


def test_dlink_error_message():
    with pytest.raises(DlinkError) as info:
        handle_json_parse(DlinkError("op"), '{"errno": 5, "msg": "bad"}')
    assert str(info.value) == "op: 遇到错误, 远端服务器返回错误, 代码: 5, 消息: bad"


def test_str_without_operation():
    assert str(PCSError("", err=ValueError("boom"))) == "boom"
    assert str(PanError("")) == STR_SUCCESS


def test_str_net_and_other_errors():
    err = PCSError("op")
    err.set_net_error(ValueError("boom"))
    assert err.err_type is ErrType.NET
    assert str(err) == "op: 网络错误, boom"

    other = PanError("op", ErrType.OTHERS, ValueError("boom"))
    assert str(other) == "op, 遇到错误, boom"
    assert str(PanError("op", ErrType.OTHERS)) == "op: 操作成功"


def test_remote_error_with_zero_code_is_success_message():
    err = PCSError("op")
    err.set_remote_error()
    assert str(err) == "op: 操作成功"