
from typing import Any, AsyncIterator, ClassVar, Dict, Generic, Type, TypeVar

from .collection import Collection
from .manager import ResourceManager
from .resource import Resource

__all__ = ('Endpoint',)

R = TypeVar('R', bound=Resource)


class Endpoint(Generic[R]):
    """CRUD operations for a single type of resources.

    Either subclass it and set ``resource_class``, or pass the class to the
    constructor.

    Example::

        class ClientEndpoint(Endpoint[Client]):
            resource_class = Client

        clients = ClientEndpoint(manager)
        page = await clients.list(is_active=True)
        client = await clients.retrieve(page[0].id)

    :param resource_manager:
    :param resource_class:
    """

    resource_class: ClassVar[Type[Resource]]

    def __init__(
        self,
        resource_manager: ResourceManager,
        resource_class: Type[R] = None,
    ) -> None:
        self._resource_manager = resource_manager
        if resource_class is None:
            resource_class = getattr(self, 'resource_class', None)
        if resource_class is None:
            raise TypeError(f'{type(self).__name__} has no resource class')
        self._resource_class: Type[R] = resource_class

    @staticmethod
    def _check_id(id: Any) -> None:  # noqa: B002
        if not isinstance(id, int) or isinstance(id, bool) or id < 1:
            raise ValueError(f'Expected a positive integer id, got {id!r}')

    def _check_resource(self, resource: R) -> None:
        if not isinstance(resource, self._resource_class):
            raise ValueError('Resource does not belong to this endpoint')

    async def list(self, **filters: Any) -> Collection[R]:
        """Fetch one page of resources.

        :param filters: Filter criteria, sent as query parameters (``page``
            and ``per_page`` select the page).
        """
        return await self._resource_manager.list(
            self._resource_class,
            meta={'params': filters},
        )

    def iterate(self, **filters: Any) -> AsyncIterator[R]:
        """Iterate over resources from all pages.

        Example::

            async for client in clients.iterate(is_active=True):
                print(client.name)

        :param filters: Filter criteria, sent as query parameters.
        """
        return self._resource_manager.iterate(
            self._resource_class,
            meta={'params': filters},
        )

    async def retrieve(self, id: int) -> R:  # noqa: B002
        """Fetch resource by id.

        :param id: Positive integer.
        :raises ClientError: With status 404 if there is no such resource.
        """
        self._check_id(id)
        return await self._resource_manager.get(self._resource_class, id)

    def new(self, **fields: Any) -> R:
        """Create a new instance, but don't save it.

        :param fields: Initial field values.
        """
        return self._resource_manager.new(self._resource_class, **fields)

    async def create(self, resource: R) -> R:
        """Create resource.

        :param resource: The resource to create.
        :return: Created resource, as returned by the server.
        """
        self._check_resource(resource)
        return await self._resource_manager.create(resource)

    async def update(self, resource: R) -> R:
        """Update resource, sending only the fields which are set.

        :param resource: The resource to update, must have an id.
        :return: Updated resource, as returned by the server.
        """
        self._check_resource(resource)
        return await self._resource_manager.update(resource)

    async def delete(self, id: int) -> None:  # noqa: B002
        """Delete resource by id.

        :param id: Positive integer.
        """
        self._check_id(id)
        await self._resource_manager.delete(self._resource_class, id)

    async def _patch(self, id: int, data: Dict[str, Any]) -> R:  # noqa: B002
        """Send a custom partial body to the resource, return the result.

        Base for resource-specific operations.

        :param id:
        :param data:
        """
        self._check_id(id)
        return await self._resource_manager.patch(
            self._resource_class, id, data,
        )
