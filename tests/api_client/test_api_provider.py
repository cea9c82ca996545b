import json
from asyncio.exceptions import TimeoutError
from http import HTTPStatus
from unittest import mock

import pytest
from aiohttp import ClientError
from aiohttp import ClientSession

from pixiv_api.api_client import ApiException
from pixiv_api.api_client import ApiProvider
from pixiv_api.api_client import DecodeError
from pixiv_api.api_client import TransportError
from pixiv_api.base.domain.exceptions import FetchError

MODULE = "pixiv_api.api_client.api_provider"


async def fake_token():
    return {"Authorization": "Bearer abc"}


@pytest.fixture
def response():
    # this mocks the aiohttp.ClientResponse:
    response = mock.Mock()
    response.status = int(HTTPStatus.OK)
    response.headers = {"Content-Type": "application/json"}
    response.json = mock.AsyncMock(return_value={"foo": 2})
    response.read = mock.AsyncMock()
    return response


@pytest.fixture
def request_m() -> mock.AsyncMock:
    request = mock.AsyncMock()
    with mock.patch.object(ClientSession, "request", new=request):
        yield request


@pytest.fixture
def api_provider(response, request_m) -> ApiProvider:
    request_m.return_value = response
    return ApiProvider(url="http://testserver/foo/", headers_factory=fake_token)


async def test_get(api_provider: ApiProvider, request_m):
    actual = await api_provider.request("GET", "")

    assert request_m.call_count == 1
    assert request_m.call_args[1] == dict(
        method="GET",
        url="http://testserver/foo",
        headers={"Authorization": "Bearer abc"},
        timeout=5.0,
        data=None,
        json=None,
    )
    assert actual == {"foo": 2}


async def test_post_fields(api_provider: ApiProvider, request_m):
    await api_provider.request("POST", "bar", fields={"comment": "nice"})

    assert request_m.call_args[1] == dict(
        method="POST",
        url="http://testserver/foo/bar",
        data={"comment": "nice"},
        json=None,
        headers={"Authorization": "Bearer abc"},
        timeout=5.0,
    )


@pytest.mark.parametrize(
    "path,params,expected_url",
    [
        ("", None, "http://testserver/foo"),
        ("bar", None, "http://testserver/foo/bar"),
        ("bar/", None, "http://testserver/foo/bar"),
        ("", {"a": 2}, "http://testserver/foo?a=2"),
        ("bar", {"a": 2}, "http://testserver/foo/bar?a=2"),
        ("", {"a": [1, 2]}, "http://testserver/foo?a=1&a=2"),
        ("", {"a": 1, "b": "foo"}, "http://testserver/foo?a=1&b=foo"),
        ("", {"a": None}, "http://testserver/foo"),
        ("", {"a": 1, "b": None}, "http://testserver/foo?a=1"),
    ],
)
async def test_url(api_provider: ApiProvider, path, params, expected_url, request_m):
    await api_provider.request("GET", path, params=params)
    assert request_m.call_args[1]["url"] == expected_url


@pytest.mark.parametrize(
    "url",
    [
        "https://app-api.pixiv.net/v1/user/illusts?user_id=1&offset=30",
        "http://otherserver/x?cursor=2&filter=for_ios",
    ],
)
async def test_absolute_url_is_used_verbatim(api_provider: ApiProvider, request_m, url):
    await api_provider.request("GET", url)
    assert request_m.call_args[1]["url"] == url


async def test_absolute_url_with_params(api_provider: ApiProvider, request_m):
    with pytest.raises(ValueError):
        await api_provider.request("GET", "http://otherserver/x", params={"a": 1})

    assert not request_m.called


async def test_timeout(api_provider: ApiProvider, request_m):
    await api_provider.request("POST", "bar", timeout=2.1)
    assert request_m.call_args[1]["timeout"] == 2.1


@pytest.mark.parametrize(
    "status", [HTTPStatus.OK, HTTPStatus.NOT_FOUND, HTTPStatus.INTERNAL_SERVER_ERROR]
)
async def test_unexpected_content_type(api_provider: ApiProvider, response, status):
    response.status = int(status)
    response.headers["Content-Type"] = "text/plain"
    with pytest.raises(ApiException) as e:
        await api_provider.request("GET", "bar")

    assert e.value.status is status
    assert str(e.value) == f"{status}: Unexpected content type 'text/plain'"


async def test_json_variant_content_type(api_provider: ApiProvider, response):
    response.headers["Content-Type"] = "application/something+json"
    actual = await api_provider.request("GET", "bar")
    assert actual == {"foo": 2}


async def test_no_content(api_provider: ApiProvider, response):
    response.status = int(HTTPStatus.NO_CONTENT)
    response.headers = {}

    actual = await api_provider.request("DELETE", "bar/2")
    assert actual is None


@pytest.mark.parametrize(
    "status",
    [HTTPStatus.BAD_REQUEST, HTTPStatus.NOT_FOUND, HTTPStatus.INTERNAL_SERVER_ERROR],
)
async def test_error_response(api_provider: ApiProvider, response, status):
    response.status = int(status)

    with pytest.raises(ApiException) as e:
        await api_provider.request("GET", "bar")

    assert e.value.status is status
    assert isinstance(e.value, FetchError)
    assert str(e.value) == str(int(status)) + ": {'foo': 2}"


async def test_no_retry_by_default(api_provider: ApiProvider, response, request_m):
    response.status = int(HTTPStatus.INTERNAL_SERVER_ERROR)

    with pytest.raises(ApiException):
        await api_provider.request("GET", "bar")

    assert request_m.call_count == 1


async def test_custom_header(api_provider: ApiProvider, request_m):
    await api_provider.request("POST", "bar", headers={"foo": "bar"})
    assert request_m.call_args[1]["headers"] == {
        "foo": "bar",
        **(await api_provider._headers_factory()),
    }


async def test_custom_header_precedes(api_provider: ApiProvider, request_m):
    await api_provider.request("POST", "bar", headers={"Authorization": "bar"})
    assert request_m.call_args[1]["headers"]["Authorization"] == "bar"


@pytest.fixture
def retry_provider():
    return ApiProvider(url="http://testserver/foo/", retries=1, backoff_factor=0.001)


@pytest.fixture
def error_response():
    # this mocks the aiohttp.ClientResponse:
    response = mock.Mock()
    response.status = int(HTTPStatus.SERVICE_UNAVAILABLE)
    response.headers = {"Content-Type": "text/html"}
    response.read = mock.AsyncMock()
    return response


@pytest.mark.parametrize("error_cls", [ClientError, TimeoutError])
@mock.patch.object(ClientSession, "request", new_callable=mock.AsyncMock)
async def test_retry_client_error(
    request_m, retry_provider: ApiProvider, error_cls, response
):
    request_m.side_effect = (error_cls(), response)

    actual = await retry_provider.request("GET", "")

    assert request_m.call_count == 2
    assert actual == {"foo": 2}


@mock.patch.object(ClientSession, "request", new_callable=mock.AsyncMock)
async def test_retry_client_error_too_many(request_m, retry_provider: ApiProvider):
    request_m.side_effect = (ClientError("bar"), ClientError("foo"))

    with pytest.raises(TransportError, match="foo") as e:
        await retry_provider.request("GET", "")

    assert isinstance(e.value.__cause__, ClientError)

    assert request_m.call_count == 2


@pytest.mark.parametrize("error_code", [429, 500, 502, 503, 504])
@mock.patch.object(ClientSession, "request", new_callable=mock.AsyncMock)
async def test_retry_error_response(
    request_m, retry_provider: ApiProvider, error_code: int, response, error_response
):
    error_response.status = error_code
    request_m.side_effect = (error_response, response)

    actual = await retry_provider.request("GET", "")

    assert request_m.call_count == 2
    assert actual == {"foo": 2}


@mock.patch.object(ClientSession, "request", new_callable=mock.AsyncMock)
async def test_retry_error_response_too_many(
    request_m, retry_provider: ApiProvider, error_response
):
    request_m.return_value = error_response

    with pytest.raises(ApiException) as e:
        await retry_provider.request("GET", "")

    assert request_m.call_count == 2
    assert e.value.status == 503


@mock.patch.object(ClientSession, "request", new_callable=mock.AsyncMock)
async def test_no_retry_on_post(request_m, retry_provider: ApiProvider):
    request_m.side_effect = ClientError()

    with pytest.raises(TransportError):
        await retry_provider.request("POST", "")

    assert request_m.call_count == 1


@pytest.mark.parametrize("error", [ClientError("refused"), TimeoutError()])
async def test_transport_error(api_provider: ApiProvider, request_m, error):
    request_m.side_effect = error

    with pytest.raises(TransportError) as e:
        await api_provider.request("GET", "bar")

    assert isinstance(e.value, FetchError)
    assert e.value.__cause__ is error


async def test_invalid_json(api_provider: ApiProvider, response):
    response.json.side_effect = json.JSONDecodeError("Expecting value", "{not", 1)

    with pytest.raises(DecodeError) as e:
        await api_provider.request("GET", "bar")

    assert e.value.status is HTTPStatus.OK
    assert isinstance(e.value, FetchError)
