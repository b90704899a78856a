import base64

import pytest
import responses

from panpcs.panhome import (
    PAN_HOME_URL,
    CookieInvalidError,
    PanHome,
    PanHomeMatchError,
    UnknownLocationError,
    sign2,
)

KEY = "e8c7d729eea7b54551aa594f942decbe"
DATA = "37dbe07ade9359c1aa70807e847f768c13360ad2"
STANDARD_B64 = "8RxCbsVeSzn2UjxJAAiV9QQs/WetOj2FJUGwjsMG6SgxFMWlLS/U1Q=="

HOME_BODY = (
    '{"sign1":"' + DATA + '","bdstoken":"x","sign3":"' + KEY + '","timestamp":1546000000,"other":1}'
)


def test_sign2_matches_standard():
    assert sign2(KEY, DATA) == base64.b64decode(STANDARD_B64)


def test_sign2_empty_key_gives_zero_bytes():
    assert sign2("", "abc") == b"\x00\x00\x00"


def test_sign2_is_symmetric():
    encrypted = sign2(KEY, DATA)
    assert sign2(KEY, encrypted.decode("latin-1")) == DATA.encode("ascii")


def test_sign2_output_length():
    assert len(sign2(KEY, DATA)) == len(DATA)


def test_signature_from_home_page():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, PAN_HOME_URL, body=HOME_BODY, status=200)
        result = PanHome().signature()
        assert rsps.calls[0].request.headers["User-Agent"] == "Android"
    assert result.sign == STANDARD_B64
    assert result.timestamp == "1546000000"


def test_cache_signature_fetches_once():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, PAN_HOME_URL, body=HOME_BODY, status=200)
        ph = PanHome()
        first = ph.cache_signature()
        second = ph.cache_signature()
        assert len(rsps.calls) == 1
    assert first is second


def test_signature_fetches_each_time():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, PAN_HOME_URL, body=HOME_BODY, status=200)
        ph = PanHome()
        first = ph.signature()
        second = ph.signature()
        assert len(rsps.calls) == 2
    assert first.sign == STANDARD_B64
    assert second.sign == STANDARD_B64
    assert second.timestamp == "1546000000"


def test_redirect_to_root_means_invalid_cookie():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, PAN_HOME_URL, status=302, headers={"Location": "/"})
        with pytest.raises(CookieInvalidError):
            PanHome().signature()


def test_unknown_redirect():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, PAN_HOME_URL, status=302, headers={"Location": "/login"})
        with pytest.raises(UnknownLocationError):
            PanHome().signature()


def test_unmatched_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, PAN_HOME_URL, body="<html></html>", status=200)
        with pytest.raises(PanHomeMatchError):
            PanHome().cache_signature()