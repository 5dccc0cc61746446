"""Relations between resource types."""

import importlib
from functools import lru_cache
from typing import Any, Dict, Generic, List, Sequence, Type, TypeVar, \
    Union, cast

from .hydrator import BaseDescriptor, Descriptor, HydrationTypeError, \
    Hydrator, Serializer
from .resource import Resource, ResourceError, get_id_attr

__all__ = (
    'OneToMany',
    'ManyToOne',
    'OneToManySerializer',
    'ManyToOneSerializer',
)

R = TypeVar('R', bound=Resource)
S = TypeVar('S', bound=Resource)
D = TypeVar('D', bound=BaseDescriptor)


class Relation(Generic[R]):

    def __init__(
        self,
        target_class: Union[Type[R], str],
        *, field: str = None,
        save_field: str = None,
        readonly: bool = False,
        name: str = None,
    ) -> None:
        super().__init__(  # type: ignore
            field=field, save_field=save_field, readonly=readonly, name=name,
        )
        self._target_class = target_class

    @lru_cache(maxsize=256)
    def target_class(self, owner: Type[S]) -> Type[R]:
        """Get class on the other side of this relation."""
        if isinstance(self._target_class, str):
            module = importlib.import_module(owner.__module__)
            cls = cast(Type[R], getattr(module, self._target_class, None))
            if cls is None:
                raise NameError(
                    f"Class '{owner.__module__}.{self._target_class}' "
                    f'is not defined',
                )
            self._target_class = cls
        return self._target_class


class OneToMany(Relation[R], Descriptor[List[R]]):
    """One to many relation, embedded in the owner's JSON as an array.

    Example::

        class LineItem(Resource):
            id = typed(int)

        class Invoice(Resource):
            line_items = OneToMany(LineItem)

    When accessed, returns a `list` of target resources (or `None`).

    :param target_class: Target class or its name (useful for circular
        dependencies).
    :param field: Override the key in the serialized dictionary. Default is
        the variable name this descriptor is assigned to.
    :param save_field: Same as *field* but only for saving (serializing).
    :param readonly: Don't allow setting the field by user code.
    """


class ManyToOne(Relation[R], Descriptor[R]):
    """Many to one relation, embedded in the owner's JSON as an object.

    Example::

        class Client(Resource):
            id = typed(int)
            name = typed(str)

        class Contact(Resource):
            client = ManyToOne(Client, save_fields=('id', 'name'))

    When deserializing, a nested object is hydrated into a target instance.
    A bare scalar is assumed to be the target's id.

    :param target_class: Target class or its name (useful for circular
        dependencies).
    :param field: Override the key in the serialized dictionary. Default is
        the variable name this descriptor is assigned to.
    :param save_field: Same as *field* but only for saving (serializing).
    :param readonly: Don't allow setting the field by user code.
    :param save_by_value: Whether to save as a nested object or by id.
    :param save_fields: When saving by value, names of target fields to
        include. All of them by default.
    """

    def __init__(
        self,
        target_class: Union[Type[R], str],
        *, field: str = None,
        save_field: str = None,
        readonly: bool = False,
        name: str = None,
        save_by_value: bool = True,
        save_fields: Sequence[str] = None,
    ) -> None:
        super().__init__(
            target_class, field=field, save_field=save_field,
            readonly=readonly, name=name,
        )
        self.save_by_value = save_by_value
        self.save_fields = tuple(save_fields) if save_fields else None


class RelationSerializer(Serializer[D]):

    def __init__(self, hydrator: Hydrator) -> None:
        self._hydrator = hydrator

    def _instantiate(self, target_cls: Type[R], data: Dict[str, Any]) -> R:
        resource = target_cls()
        self._hydrator.hydrate(resource, data)
        return resource


class OneToManySerializer(RelationSerializer[OneToMany[R]]):
    """`OneToMany` serializer.

    :param hydrator: Used for the related resources.
    """

    supported_descriptors = {OneToMany}

    def load(
        self,
        descr: OneToMany[R],
        value: Any,
        resource: Any,
    ) -> None:
        if value is None:
            descr.set(resource, None)
            return
        if not isinstance(value, list):
            raise HydrationTypeError(list, value)
        target_cls = descr.target_class(type(resource))
        descr.set(resource, [self._instantiate(target_cls, e) for e in value])

    def dump(
        self,
        descr: OneToMany[R],
        resource: Any,
    ) -> Any:
        targets = descr.__get__(resource, None)
        if targets is None:
            return None
        if not isinstance(targets, (list, tuple)):
            raise HydrationTypeError(list, targets)
        target_cls = descr.target_class(type(resource))
        data = []
        for target in targets:
            if not isinstance(target, target_cls):
                raise HydrationTypeError(target_cls, target)
            data.append(self._hydrator.dehydrate(target))
        return data


class ManyToOneSerializer(RelationSerializer[ManyToOne[R]]):
    """`ManyToOne` serializer.

    :param hydrator: Used for the related resource.
    """

    supported_descriptors = {ManyToOne}

    def load(
        self,
        descr: ManyToOne[R],
        value: Any,
        resource: Any,
    ) -> None:
        types = (dict, int, str)
        if value is None:
            descr.set(resource, None)
            return
        if not isinstance(value, types) or isinstance(value, bool):
            raise HydrationTypeError(types, value)
        target_cls = descr.target_class(type(resource))
        if not isinstance(value, dict):
            # assume it's id
            value = {get_id_attr(target_cls): value}
        descr.set(resource, self._instantiate(target_cls, value))

    def dump(
        self,
        descr: ManyToOne[R],
        resource: Any,
    ) -> Any:
        target = descr.__get__(resource, None)
        if target is None:
            return None
        target_cls = descr.target_class(type(resource))
        if not isinstance(target, target_cls):
            raise HydrationTypeError(target_cls, target)
        if descr.save_by_value:
            return self._hydrator.dehydrate(target, only=descr.save_fields)
        id = getattr(target, get_id_attr(target_cls), None)  # noqa: B001
        if id is None:
            raise ResourceError("Can't save many-to-one relation, "
                                'target has no id')
        return id
