from urllib.parse import parse_qs, urlsplit

import pytest
import requests
import responses

from panpcs.errors import ErrType, PanError
from panpcs.panhome import PanHome
from panpcs.session import NETDISK_UA, PAN_APP_ID, Operation, PCSSession

UK_URL = "http://pan.baidu.com/api/user/getinfo"


def test_operation_names_error_message():
    s = PCSSession(1)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, UK_URL, body=requests.ConnectionError("down"))
        with pytest.raises(PanError) as info:
            s.uk()
    assert str(info.value).startswith("获取UK: 网络错误")
    assert info.value.operation == "获取UK"


def test_from_bduss_sets_cookie():
    s = PCSSession.from_bduss(7, "token")
    assert s.session.cookies.get("BDUSS", domain=".baidu.com") == "token"
    assert s.app_id == 7


def test_from_cookie_string_sets_all_cookies():
    s = PCSSession.from_cookie_string(1, "BDUSS=token; STOKEN=secret")
    assert s.session.cookies.get("BDUSS", domain=".baidu.com") == "token"
    assert s.session.cookies.get("STOKEN", domain=".baidu.com") == "secret"


def test_set_stoken_and_user_agent():
    s = PCSSession(1)
    s.set_stoken("token")
    s.set_user_agent("agent-x")
    assert s.session.cookies.get("STOKEN", domain=".baidu.com") == "token"
    assert s.session.headers["User-Agent"] == "agent-x"


def test_url_follows_https_flag():
    s = PCSSession(1)
    assert s.url == "http://pcs.baidu.com"
    s.https = True
    assert s.url == "https://pcs.baidu.com"


def test_pcs_url_query():
    s = PCSSession(266719)
    url = s._pcs_url("file", "list", {"path": "/a b", "by": "name"})
    parts = urlsplit(url)
    assert parts.path == "/rest/2.0/pcs/file"
    assert parse_qs(parts.query) == {
        "app_id": ["266719"],
        "method": ["list"],
        "path": ["/a b"],
        "by": ["name"],
    }


def test_pcs_url2_uses_pan_app_id():
    s = PCSSession(1)
    url = s._pcs_url2("services/cloud_dl", "add_task", {"timeout": "2147483647"})
    parts = urlsplit(url)
    assert parts.netloc == "pan.baidu.com"
    assert parse_qs(parts.query)["app_id"] == [PAN_APP_ID]


def test_pan_home_is_cached_and_shares_session():
    s = PCSSession(1)
    home = s.pan_home
    assert isinstance(home, PanHome)
    assert s.pan_home is home
    assert home.session is s.session


def test_uk_success():
    s = PCSSession(1)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, UK_URL, json={"errno": 0, "records": [{"uk": 42}]})
        assert s.uk() == 42
        request = rsps.calls[0].request
        assert "need_selfinfo=1" in request.url
        assert request.headers["User-Agent"] == NETDISK_UA


def test_uk_remote_error():
    s = PCSSession(1)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, UK_URL, json={"errno": -6})
        with pytest.raises(PanError) as info:
            s.uk()
    assert info.value.err_type is ErrType.REMOTE
    assert info.value.remote_err_code == -6


def test_uk_wrong_record_count():
    s = PCSSession(1)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, UK_URL, json={"errno": 0, "records": [{"uk": 1}, {"uk": 2}]})
        with pytest.raises(PanError) as info:
            s.uk()
    assert info.value.err_type is ErrType.OTHERS


def test_uk_bad_json():
    s = PCSSession(1)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, UK_URL, body="not json")
        with pytest.raises(PanError) as info:
            s.uk()
    assert info.value.err_type is ErrType.JSON_PARSE


def test_uk_network_error():
    s = PCSSession(1)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, UK_URL, body=requests.ConnectionError("down"))
        with pytest.raises(PanError) as info:
            s.uk()
    assert info.value.err_type is ErrType.NET
    assert info.value.operation == str(Operation.GET_UK)