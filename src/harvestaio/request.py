"""Things related to making and processing HTTP requests."""

import asyncio
import json
import logging
from copy import copy, deepcopy
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable, \
    Dict, Mapping, Optional, Sequence

import aiohttp
from aiostream import stream

from ._util import encode_params
from .hydrator import HydrationError
from .resource import ErrorKind, ResourceError

__all__ = ('Request', 'Response', 'Handler', 'TransportError', 'HTTPError',
           'ClientError', 'ServerError', 'ResponseDecodeError', 'http',
           'check_status', 'decode_json', 'inject_headers', 'unwrap', 'Paging',
           'PageNumberPaging', 'Requester')

logger = logging.getLogger(__name__)


class TransportError(ResourceError):
    """The HTTP exchange could not be completed (network error, timeout)."""

    kind = ErrorKind.TRANSPORT


class HTTPError(ResourceError):
    """Response with an error status.

    :param status:
    :param reason:
    :param body: Raw response body.
    :param method: Method of the failed request.
    :param url: URL of the failed request.
    """

    def __init__(
        self,
        status: int,
        reason: str = None,
        body: str = None,
        method: str = None,
        url: str = None,
    ) -> None:
        super().__init__(status, reason)
        self.status = status
        self.reason = reason
        self.body = body
        self.method = method
        self.url = url

    @property
    def code(self) -> int:
        """Alias of ``status``."""
        return self.status

    def __str__(self) -> str:
        s = f'HTTP response: {self.status} {self.reason or ""}'.rstrip()
        if self.method and self.url:
            s += f' ({self.method} {self.url})'
        return s


class ClientError(HTTPError):
    """4xx response: the request was invalid, unauthorized or not found."""

    kind = ErrorKind.CLIENT


class ServerError(HTTPError):
    """5xx response."""

    kind = ErrorKind.SERVER


class Request:
    """Representation of HTTP request.

    :param method:
    :param url:
    :param params: "GET" query parameters.
    :param data: JSONable data to be included in body.
    :param headers:
    :param meta: Additional info passed with this object.
    """

    def __init__(
        self,
        method: str = 'GET',
        url: str = None,
        params: Dict[str, str] = None,
        data: Any = None,
        headers: Dict[str, str] = None,
        meta: Dict[str, Any] = None,
    ) -> None:
        self.method = method
        self.url = url
        self.params = params or {}
        self.data = data
        self.headers = headers or {}
        self.meta = meta or {}

    def copy(self) -> 'Request':
        """Make a deep copy."""
        return deepcopy(self)


class Response:
    """Representation of HTTP response.

    :param status:
    :param reason:
    :param headers:
    :param data: De-JSONed body.
    :param body: Raw body.
    :param extra: Additional info passed with this object.
    """

    def __init__(
        self,
        status: int = None,
        reason: str = None,
        headers: Mapping[str, str] = None,
        data: Any = None,
        body: str = None,
        extra: Dict[str, Any] = None,
    ) -> None:
        self.status = status
        self.reason = reason
        self.headers = headers or {}
        self.data = data
        self.body = body
        self.extra = extra or {}

    def copy_shallow(self) -> 'Response':
        """Make a shallow copy."""
        return copy(self)


Handler = Callable[[Request], Awaitable[Response]]
"""Middleware type."""


class ResponseDecodeError(HydrationError):
    """Body of a successful response is not JSON.

    :param status:
    :param body: Raw response body.
    """

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f'Response body is not JSON: {body!r:.50s}')
        self.status = status
        self.body = body


def _decode_json(body: Optional[str]) -> Any:
    """Decode response body, `None` if empty."""
    if not body or not body.strip():
        return None
    return json.loads(body)


def http(session: aiohttp.ClientSession) -> Handler:
    """`aiohttp` based request handler.

    :param session:
    """
    async def handler(request: Request) -> Response:
        logger.debug('%s %s %r', request.method, request.url, request.params)
        try:
            async with session.request(
                request.method,
                request.url,
                params=request.params or None,
                json=request.data,
                headers=request.headers or None,
            ) as response:
                status = response.status
                reason = response.reason
                headers = response.headers
                body = await response.text(
                    encoding='utf-8', errors='replace',
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                f'{request.method} {request.url} failed: {e!r}',
            ) from e
        logger.debug('%s %s -> %s %s', request.method, request.url,
                     status, reason)
        return Response(
            status=status,
            reason=reason,
            headers=headers,
            body=body,
        )
    return handler


def check_status(next_handler: Handler) -> Handler:
    """Raise `ClientError` for 4xx and `ServerError` for 5xx responses.

    :param next_handler:
    """
    async def handler(request: Request) -> Response:
        response = await next_handler(request)
        if response.status >= 400:
            error_cls = ServerError if response.status >= 500 else ClientError
            logger.warning('%s %s -> %s %s', request.method, request.url,
                           response.status, response.reason)
            raise error_cls(
                response.status,
                response.reason,
                body=response.body,
                method=request.method,
                url=request.url,
            )
        return response
    return handler


def decode_json(next_handler: Handler) -> Handler:
    r"""Decode JSON body into `Response`.\ ``data``.

    Wrap a handler which already applies `check_status`, error bodies are
    not decoded.

    :param next_handler:
    :raises ResponseDecodeError: When the body is not JSON.
    """
    async def handler(request: Request) -> Response:
        response = await next_handler(request)
        try:
            response.data = _decode_json(response.body)
        except ValueError as e:
            raise ResponseDecodeError(response.status, response.body) from e
        return response
    return handler


def inject_headers(
    next_handler: Handler,
    headers: Mapping[str, str],
) -> Handler:
    """Inject headers into request, unless already set.

    :param next_handler:
    :param headers:
    """
    async def handler(request: Request) -> Response:
        for k, v in headers.items():
            request.headers.setdefault(k, v)
        return await next_handler(request)
    return handler


def unwrap(next_handler: Handler) -> Handler:
    r"""Unwrap data from containing `dict`.

    The key under which data is looked up should be passed in request's meta
    as 'key'. Other keys of the envelope (like pagination info) are moved
    to `Response`.\ ``extra``.

    :param next_handler:
    """
    async def handler(request: Request) -> Response:
        key = request.meta.get('key')
        response = await next_handler(request)
        if key and isinstance(response.data, dict) and key in response.data:
            old_data = response.data
            response.data = response.data[key]
            for k, v in old_data.items():
                if k != key:
                    response.extra[k] = v
        return response
    return handler


class Paging:
    r"""Paging handler.

    This base implementation fetches the first page only. Subclass it and
    implement `set_first` and `set_next` method.

    `Response`.\ ``data`` must be a list when passed to this class. Use
    `unwrap` if necessary.

    Returned response will have a async iterator in ``data``.

    :param next_handler:
    """

    def __init__(self, next_handler: Handler) -> None:
        self._next_handler = next_handler

    def set_first(self, request: Request) -> Request:
        """Modify request for fetching first page of results.

        :param request:
        """
        return request

    def set_next(self, request: Request, last: Response) -> Optional[Request]:
        """Modify request for fetching subsequent pages.

        :param request:
        :param last: Response of the previous request.
        :return: Modified request or None if previous page was last.
        """
        return None

    async def __call__(self, request: Request) -> Response:
        next_handler = self._next_handler
        req: Optional[Request] = self.set_first(request.copy())
        response = await next_handler(req)
        combined_response = response.copy_shallow()
        if not isinstance(response.data, (Sequence, AsyncIterable)):
            raise HydrationError('Page is not iterable')

        async def data_iter() -> AsyncIterator[Any]:
            nonlocal req
            nonlocal response
            while req:
                if not isinstance(response.data, (Sequence, AsyncIterable)):
                    raise HydrationError('Page is not iterable')
                async with stream.iterate(response.data).stream() as s:
                    async for item in s:
                        yield item
                req = self.set_next(request.copy(), response)
                if req:
                    response = await next_handler(req)

        combined_response.data = data_iter()
        return combined_response


class PageNumberPaging(Paging):
    r"""Follow the ``next_page`` number of a list envelope.

    Expects the envelope fields in `Response`.\ ``extra`` (see `unwrap`).

    :param next_handler:
    :param page_param: Name of the query parameter selecting the page.
    """

    def __init__(
        self,
        next_handler: Handler,
        page_param: str = 'page',
    ) -> None:
        super().__init__(next_handler)
        self.page_param = page_param

    def set_next(self, request: Request, last: Response) -> Optional[Request]:
        next_page = last.extra.get('next_page')
        if not next_page:
            return None
        request.params[self.page_param] = str(next_page)
        return request


class Requester:
    r"""Prepare and execute HTTP requests for resources.

    meta `dict`\ s passed to methods should generally have 'uri' key, which
    will be concatenated with *base_url*. 'params' are encoded with
    `encode_params` and sent as the query string.

    Every handler raises `HTTPError` on error statuses. Bodies are decoded
    from JSON for every method except delete. Subclasses can wrap the
    handlers with more middleware.

    :param base_url:
    :param session: `aiohttp` client session.
    :param headers: Sent with every request.
    """

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession,
        headers: Mapping[str, str] = None,
    ) -> None:
        self._base_url = base_url.rstrip('/')
        raw_handler = check_status(http(session))
        if headers:
            raw_handler = inject_headers(raw_handler, headers)
        self.get_handler = decode_json(raw_handler)
        self.list_handler = unwrap(self.get_handler)
        self.iterate_handler: Handler = PageNumberPaging(self.list_handler)
        self.create_handler = self.get_handler
        self.update_handler = self.get_handler
        self.delete_handler = raw_handler

    def _request(
        self,
        method: str,
        meta: Dict[str, Any],
        data: Any = None,
    ) -> Request:
        return Request(
            method, self._base_url + meta['uri'],
            params=encode_params(meta.get('params') or {}),
            data=data,
            meta=meta,
        )

    async def get(self, meta: Dict[str, Any]) -> Any:
        """Fetch single resource by id.

        :param meta: 'uri' should already include the id.
        """
        return (await self.get_handler(self._request('GET', meta))).data

    async def list(self, meta: Dict[str, Any]) -> Response:
        r"""Fetch one page of resources, possibly filtered.

        Unlike other methods, return the whole response, since pagination
        info is in `Response`.\ ``extra``.

        :param meta: Can contain filters and other options.
        """
        return await self.list_handler(self._request('GET', meta))

    async def iterate(self, meta: Dict[str, Any]) -> AsyncIterable[Any]:
        """Fetch resources from all pages.

        :param meta: Can contain filters and other options.
        """
        return (await self.iterate_handler(self._request('GET', meta))).data

    async def create(self, meta: Dict[str, Any], data: Dict[str, Any]) -> Any:
        """Create a new resource.

        :param meta:
        :param data: Resource data.
        """
        return (await self.create_handler(
            self._request('POST', meta, data),
        )).data

    async def update(self, meta: Dict[str, Any], data: Dict[str, Any]) -> Any:
        """Update an existing resource with a (partial) body.

        :param meta:
        :param data: Resource data.
        """
        return (await self.update_handler(
            self._request('PATCH', meta, data),
        )).data

    async def delete(self, meta: Dict[str, Any]) -> None:
        """Delete a resource.

        :param meta:
        """
        await self.delete_handler(self._request('DELETE', meta))
