
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, Sequence, Type, \
    TypeVar

from aiostream import stream

from ._util import format_recur, full_name
from .collection import Collection
from .hydrator import HydrationError, Hydrator
from .request import Requester
from .resource import Resource, ResourceError, get_id_attr

__all__ = ('ResourceManager',)

logger = logging.getLogger(__name__)

R = TypeVar('R', bound=Resource)

_COLLECTION_ACTIONS = ('list', 'iterate', 'create')


class ResourceManager:
    """Manages retrieval and saving of resource objects.

    Generally, this class should not be used directly -- use explicit
    `.Endpoint` for the wanted resource type instead.

    Request info comes from the resource's ``_Meta`` class: ``uri`` is the
    collection path (items are at ``<uri>/{id}``), ``key`` is the envelope
    key of list responses. Any action (``get``, ``list``, ``create``,
    ``update``, ``delete``) can be overridden with a dict of the same name::

        class Client(Resource):
            class _Meta:
                uri = '/clients'
                key = 'clients'

    The manager keeps no state between calls.

    :param requester:
    :param hydrator:
    """

    def __init__(self, requester: Requester, hydrator: Hydrator) -> None:
        self._requester = requester
        self._hydrator = hydrator

    def _get_meta(
        self,
        cls: Type[R],
        action: str,
        overrides: Dict[str, Any] = {},
        **fmt: Any,
    ) -> Dict[str, Any]:
        """Get meta info for class and action, including overrides.

        Strings in class meta are formatted with *fmt*.
        """
        cls_meta = getattr(cls, '_Meta', None)
        meta: Dict[str, Any] = {}
        uri = getattr(cls_meta, 'uri', None)
        if uri:
            if action in _COLLECTION_ACTIONS:
                meta['uri'] = uri
            else:
                meta['uri'] = uri + '/{id}'
        key = getattr(cls_meta, 'key', None)
        if key and action in ('list', 'iterate'):
            meta['key'] = key
        meta.update(getattr(
            cls_meta, 'list' if action == 'iterate' else action, {},
        ))
        meta = format_recur(meta, **fmt)
        meta.update(overrides)
        if 'uri' not in meta:
            raise ResourceError(f'{full_name(cls)} has no uri for {action}')
        return meta

    def get_id(self, resource: R) -> Any:
        """Get identifier value, or `None`.

        :param resource:
        """
        return getattr(resource, get_id_attr(type(resource)), None)

    def is_new(self, resource: R) -> bool:
        """Check if resource was created but not saved yet.

        :param resource:
        """
        return self.get_id(resource) is None

    def _instantiate(self, resource_class: Type[R], data: Any) -> R:
        """Return a new object hydrated with `data`.

        :param resource_class: Type of the resource.
        :param data:
        """
        resource = resource_class()
        self._hydrator.hydrate(resource, data)
        return resource

    async def get(
        self,
        resource_class: Type[R],
        id: Any,
        meta: Dict[str, Any] = {},
    ) -> R:
        """Fetch a resource by id.

        :param resource_class: Type of the resource.
        :param id: Identifier value.
        :param meta: Additional info to pass to the `.Requester`.
        """
        meta = self._get_meta(resource_class, 'get', meta, id=id)
        data = await self._requester.get(meta)
        return self._instantiate(resource_class, data)

    async def list(
        self,
        resource_class: Type[R],
        meta: Dict[str, Any] = {},
    ) -> Collection[R]:
        """Fetch one page of resources.

        :param resource_class: Type of the resource.
        :param meta: Additional info to pass to the `.Requester` (like filters,
            etc.).
        """
        meta = self._get_meta(resource_class, 'list', meta)
        response = await self._requester.list(meta)
        if not isinstance(response.data, list):
            raise HydrationError(
                f'Expected a list of {resource_class.__name__}, '
                f'got {type(response.data)!r}',
            )
        collection = Collection.from_envelope(
            [self._instantiate(resource_class, e) for e in response.data],
            response.extra,
        )
        logger.debug('Fetched %r', collection)
        return collection

    async def iterate(
        self,
        resource_class: Type[R],
        meta: Dict[str, Any] = {},
    ) -> AsyncIterator[R]:
        """Fetch resources from all pages.

        :param resource_class: Type of the resource.
        :param meta: Additional info to pass to the `.Requester` (like filters,
            etc.).
        """
        meta = self._get_meta(resource_class, 'iterate', meta)
        response = await self._requester.iterate(meta)
        if not isinstance(response, (Sequence, AsyncIterable)):
            raise HydrationError(
                f'Expected an iterable, got {type(response)!r}',
            )
        async with stream.iterate(response).stream() as s:
            async for data in s:
                yield self._instantiate(resource_class, data)

    def new(self, resource_class: Type[R], **fields: Any) -> R:
        """Create a new instance, but don't save it.

        :param resource_class: Type of the resource.
        :param fields: Initial field values.
        """
        return resource_class(**fields)

    async def create(self, resource: R, meta: Dict[str, Any] = {}) -> R:
        """Create resource on the server.

        :param resource: The resource to create. It's not modified.
        :param meta: Additional info to pass to the `.Requester`.
        :return: Resource as returned by the server.
        """
        cls = type(resource)
        data = self._hydrator.dehydrate(resource)
        meta = self._get_meta(cls, 'create', meta)
        response = await self._requester.create(meta, data)
        if response is None:
            raise HydrationError(
                f'Empty response for create of {cls.__name__}',
            )
        return self._instantiate(cls, response)

    async def update(self, resource: R, meta: Dict[str, Any] = {}) -> R:
        """Update resource on the server with all its set fields.

        :param resource: The resource to update, must have an id. It's not
            modified.
        :param meta: Additional info to pass to the `.Requester`.
        :return: Resource as returned by the server.
        """
        if self.is_new(resource):
            raise ResourceError(f"Can't update {resource!r} without id")
        data = self._hydrator.dehydrate(resource)
        return await self.patch(type(resource), self.get_id(resource), data,
                                meta)

    async def patch(
        self,
        resource_class: Type[R],
        id: Any,
        data: Dict[str, Any],
        meta: Dict[str, Any] = {},
    ) -> R:
        """Send a custom partial body to the resource's update uri.

        :param resource_class: Type of the resource.
        :param id: Identifier value.
        :param data: JSONable body.
        :param meta: Additional info to pass to the `.Requester`.
        :return: Resource as returned by the server.
        """
        meta = self._get_meta(resource_class, 'update', meta, id=id)
        response = await self._requester.update(meta, data)
        if response is None:
            raise HydrationError(
                f'Empty response for update of {resource_class.__name__}',
            )
        return self._instantiate(resource_class, response)

    async def delete(
        self,
        resource_class: Type[R],
        id: Any,
        meta: Dict[str, Any] = {},
    ) -> None:
        """Delete a resource by id.

        :param resource_class: Type of the resource.
        :param id: Identifier value.
        :param meta: Additional info to pass to the `.Requester`.
        """
        meta = self._get_meta(resource_class, 'delete', meta, id=id)
        await self._requester.delete(meta)
        logger.debug('Deleted %s %r', resource_class.__name__, id)

