
import asyncio

import aiohttp
import pytest

from harvestaio.hydrator import HydrationError
from harvestaio.request import *
from harvestaio.resource import ErrorKind


def mock_session(mocker, status=200, reason='OK', body='', headers=None):
    session = mocker.MagicMock(spec=aiohttp.ClientSession)
    aio_resp = mocker.Mock()
    aio_resp.status = status
    aio_resp.reason = reason
    aio_resp.headers = headers or {}
    aio_resp.text = mocker.AsyncMock(return_value=body)
    session.request.return_value.__aenter__.return_value = aio_resp
    return session


class TestHttp:

    @pytest.mark.asyncio
    async def test_http(self, mocker):
        session = mock_session(
            mocker, 404, 'Not Found', '{"json": "data"}',
            {'X-Response-Header': 'foo'},
        )
        req = Request(
            method='POST',
            url='http://example.com',
            params={'foo': 'x'},
            data={'bar': 'y'},
            headers={'X-Header': 'baz'},
        )
        resp = await http(session)(req)
        aio_req_args = session.request.call_args
        assert aio_req_args == (
            (req.method, req.url),
            {
                'params': req.params,
                'json': req.data,
                'headers': req.headers,
            },
        )
        assert resp.status == 404
        assert resp.reason == 'Not Found'
        assert resp.headers == {'X-Response-Header': 'foo'}
        assert resp.data is None
        assert resp.body == '{"json": "data"}'

    @pytest.mark.asyncio
    async def test_http_without_body(self, mocker):
        session = mock_session(mocker)
        resp = await http(session)(Request('DELETE', 'http://example.com'))
        assert session.request.call_args == (
            ('DELETE', 'http://example.com'),
            {'params': None, 'json': None, 'headers': None},
        )
        assert resp.data is None
        assert resp.body == ''

    @pytest.mark.asyncio
    async def test_http_reads_body_leniently(self, mocker):
        session = mock_session(mocker, 502, 'Bad Gateway', '� bad')
        resp = await http(session)(Request(url='http://example.com'))
        aio_resp = session.request.return_value.__aenter__.return_value
        assert aio_resp.text.call_args == (
            (), {'encoding': 'utf-8', 'errors': 'replace'},
        )
        assert resp.body == '� bad'

    @pytest.mark.parametrize('exc', [
        aiohttp.ClientConnectionError('connection refused'),
        asyncio.TimeoutError(),
    ])
    @pytest.mark.asyncio
    async def test_http_transport_error(self, mocker, exc):
        session = mocker.MagicMock(spec=aiohttp.ClientSession)
        session.request.side_effect = exc
        with pytest.raises(TransportError) as e:
            await http(session)(Request(url='http://example.com'))
        assert e.value.kind is ErrorKind.TRANSPORT
        assert e.value.__cause__ is exc


def mock_handler(response, expected_request=None):
    async def handler(request):
        assert expected_request is None or \
            request.__dict__ == expected_request.__dict__
        return response
    return handler


class TestHTTPError:

    def test_str(self):
        e = ClientError(404, 'Not Found', '', 'GET', 'http://example.com/1')
        assert str(e) == 'HTTP response: 404 Not Found ' \
            '(GET http://example.com/1)'
        assert str(ServerError(500)) == 'HTTP response: 500'

    def test_code(self):
        assert ClientError(422).code == 422


class TestHandlers:

    @pytest.mark.parametrize('status', [200, 201, 301])
    @pytest.mark.asyncio
    async def test_check_status_ok(self, status):
        req = Request()
        resp = Response(status=status)
        handler = mock_handler(resp, req)
        assert await check_status(handler)(req) == resp

    @pytest.mark.parametrize('status,error_cls,kind', [
        (400, ClientError, ErrorKind.CLIENT),
        (401, ClientError, ErrorKind.CLIENT),
        (404, ClientError, ErrorKind.CLIENT),
        (422, ClientError, ErrorKind.CLIENT),
        (500, ServerError, ErrorKind.SERVER),
        (503, ServerError, ErrorKind.SERVER),
    ])
    @pytest.mark.asyncio
    async def test_check_status_not_ok(self, status, error_cls, kind):
        req = Request('GET', 'http://example.com/clients/1')
        resp = Response(status=status, reason='Reason', body='{"e": 1}')
        handler = mock_handler(resp, req)
        with pytest.raises(error_cls) as e:
            await check_status(handler)(req)
        assert e.value.status == status
        assert e.value.reason == 'Reason'
        assert e.value.body == '{"e": 1}'
        assert e.value.method == 'GET'
        assert e.value.url == 'http://example.com/clients/1'
        assert e.value.kind is kind

    @pytest.mark.parametrize('body,data', [
        ('{"id": 1}', {'id': 1}),
        ('[1, 2]', [1, 2]),
        ('', None),
        ('  \n', None),
        (None, None),
    ])
    @pytest.mark.asyncio
    async def test_decode_json(self, body, data):
        req = Request()
        handler = mock_handler(Response(status=200, body=body), req)
        resp = await decode_json(handler)(req)
        assert resp.data == data
        assert resp.body == body

    @pytest.mark.parametrize('body', ['<html></html>', 'OK', '�{'])
    @pytest.mark.asyncio
    async def test_decode_json_throws_on_bad_json(self, body):
        req = Request()
        handler = mock_handler(Response(status=201, body=body), req)
        with pytest.raises(ResponseDecodeError) as e:
            await decode_json(handler)(req)
        assert isinstance(e.value, HydrationError)
        assert e.value.kind is ErrorKind.SERIALIZATION
        assert e.value.status == 201
        assert e.value.body == body

    @pytest.mark.asyncio
    async def test_inject_headers(self):
        req = Request(headers={'Accept': 'text/plain'})
        expected_request = req.copy()
        expected_request.headers['User-Agent'] = 'foo'
        resp = Response()
        handler = mock_handler(resp, expected_request)
        headers = {'Accept': 'application/json', 'User-Agent': 'foo'}
        assert await inject_headers(handler, headers)(req) == resp

    @pytest.mark.asyncio
    async def test_unwrap(self):
        req = Request(meta={'key': 'objects'})
        objects = [{'foo': 1}, {}]
        orig_resp = Response(data={'objects': objects, 'page': 1})
        handler = mock_handler(orig_resp, req)
        resp = await unwrap(handler)(req)
        assert resp.data == objects
        assert resp.extra == {'page': 1}

    @pytest.mark.asyncio
    async def test_unwrap_on_no_key(self):
        req = Request(meta={'key': 'objects'})
        data = []
        orig_resp = Response(data=data)
        handler = mock_handler(orig_resp, req)
        resp = await unwrap(handler)(req)
        assert resp.data == data
        assert resp.extra == {}

    def paging(self, pages):
        async def next_handler(request):
            nonlocal c
            c += 1
            return Response(data=pages[c])
        c = -1
        paging = Paging(next_handler)
        paging.set_next = lambda req, _: req if c + 1 < len(pages) else None
        return paging

    @pytest.mark.parametrize('pages,result', [
        ([[0, 1], [2], [3, 4]], [0, 1, 2, 3, 4]),
        ([[0]], [0]),
    ])
    @pytest.mark.asyncio
    async def test_paging(self, pages, result):
        paging = self.paging(pages)
        resp = await paging(Request())
        all_pages = []
        async for item in resp.data:
            all_pages.append(item)

        assert all_pages == result

    @pytest.mark.parametrize('pages', [
        [True],
        [[0, 1], True],
    ])
    @pytest.mark.asyncio
    async def test_paging_bad_type(self, pages):
        paging = self.paging(pages)
        with pytest.raises(HydrationError):
            resp = await paging(Request())
            async for item in resp.data:  # noqa: F841
                pass

    @pytest.mark.asyncio
    async def test_page_number_paging(self):
        pages = [
            Response(data=[0, 1], extra={'page': 1, 'next_page': 2}),
            Response(data=[2, 3], extra={'page': 2, 'next_page': 3}),
            Response(data=[4], extra={'page': 3, 'next_page': None}),
        ]
        requests = []

        async def next_handler(request):
            requests.append(request)
            return pages[len(requests) - 1]

        req = Request(params={'is_active': 'true'})
        resp = await PageNumberPaging(next_handler)(req)
        items = []
        async for item in resp.data:
            items.append(item)

        assert items == [0, 1, 2, 3, 4]
        assert [r.params for r in requests] == [
            {'is_active': 'true'},
            {'is_active': 'true', 'page': '2'},
            {'is_active': 'true', 'page': '3'},
        ]
        assert req.params == {'is_active': 'true'}


class TestRequester:

    @pytest.mark.parametrize('action,method,kwargs', [
        ('get', 'GET', {}),
        ('create', 'POST', {'data': {'name': 'foo'}}),
        ('update', 'PATCH', {'data': {'name': 'foo'}}),
    ])
    @pytest.mark.asyncio
    async def test_requester(self, action, method, kwargs, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        data = {'foo': 'bar'}
        http.return_value = mocker.AsyncMock(
            return_value=Response(status=200, body='{"foo": "bar"}'),
        )
        requester = Requester('http://example.com/', mocker.Mock())
        result = await getattr(requester, action)(
            dict(
                uri='/foo',
                params={'bar': 'baz', 'flag': True},
            ),
            **kwargs,
        )
        req = http.return_value.call_args[0][0]
        assert isinstance(req, Request)
        assert req.method == method
        assert req.url == 'http://example.com/foo'
        assert req.params == {'bar': 'baz', 'flag': 'true'}
        assert req.data == kwargs.get('data')
        assert result == data

    @pytest.mark.asyncio
    async def test_list_returns_response(self, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        http.return_value = mocker.AsyncMock(return_value=Response(
            status=200,
            body='{"foos": [1, 2], "page": 1, "total_pages": 1}',
        ))
        requester = Requester('http://example.com', mocker.Mock())
        resp = await requester.list({'uri': '/foos', 'key': 'foos'})
        assert resp.data == [1, 2]
        assert resp.extra == {'page': 1, 'total_pages': 1}

    @pytest.mark.asyncio
    async def test_iterate(self, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        http.return_value = mocker.AsyncMock(side_effect=[
            Response(status=200, body='{"foos": [1, 2], "next_page": 2}'),
            Response(status=200, body='{"foos": [3], "next_page": null}'),
        ])
        requester = Requester('http://example.com', mocker.Mock())
        items = []
        async for item in await requester.iterate(
            {'uri': '/foos', 'key': 'foos'},
        ):
            items.append(item)
        assert items == [1, 2, 3]
        req = http.return_value.call_args[0][0]
        assert req.params == {'page': '2'}

    @pytest.mark.asyncio
    async def test_delete(self, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        http.return_value = mocker.AsyncMock(
            return_value=Response(status=200),
        )
        requester = Requester('http://example.com', mocker.Mock())
        assert await requester.delete({'uri': '/foos/1'}) is None
        req = http.return_value.call_args[0][0]
        assert req.method == 'DELETE'
        assert req.url == 'http://example.com/foos/1'

    @pytest.mark.asyncio
    async def test_throws_on_error_status(self, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        http.return_value = mocker.AsyncMock(
            return_value=Response(status=404, reason='Not Found', body=''),
        )
        requester = Requester('http://example.com', mocker.Mock())
        with pytest.raises(ClientError) as e:
            await requester.get({'uri': '/foos/1'})
        assert e.value.status == 404

    @pytest.mark.asyncio
    async def test_headers(self, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        http.return_value = mocker.AsyncMock(
            return_value=Response(status=200, body='{}'),
        )
        requester = Requester('http://example.com', mocker.Mock(),
                              headers={'User-Agent': 'foo'})
        await requester.get({'uri': '/foos/1'})
        req = http.return_value.call_args[0][0]
        assert req.headers == {'User-Agent': 'foo'}

    @pytest.mark.asyncio
    async def test_delete_ignores_body(self, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        http.return_value = mocker.AsyncMock(
            return_value=Response(status=200, body='OK'),
        )
        requester = Requester('http://example.com', mocker.Mock())
        assert await requester.delete({'uri': '/foos/1'}) is None

    @pytest.mark.asyncio
    async def test_throws_on_bad_json(self, mocker):
        http = mocker.patch('harvestaio.request.http', autospec=True)
        http.return_value = mocker.AsyncMock(
            return_value=Response(status=200, body='OK'),
        )
        requester = Requester('http://example.com', mocker.Mock())
        with pytest.raises(ResponseDecodeError) as e:
            await requester.get({'uri': '/foos/1'})
        assert e.value.status == 200
        assert e.value.body == 'OK'
