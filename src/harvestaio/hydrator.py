"""Serialization and deserialization of resources to and from JSON."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from functools import lru_cache
from typing import AbstractSet, Any, ClassVar, Collection, Dict, Generic, \
    Sequence, Tuple, Type, TypeVar, Union, cast

from ._util import DATE_FORMAT, DATETIME_FORMAT, format_datetime, full_name
from .resource import ErrorKind, ResourceError

__all__ = (
    'Hydrator',
    'HydrationError',
    'HydrationTypeError',
    'BaseDescriptor',
    'Descriptor',
    'typed',
    'typed_descriptor',
    'BaseTypedDescriptor',
    'Serializer',
    'ScalarSerializer',
    'DateTimeSerializer',
)

Types = Union[Type, Tuple[Type, ...]]
T = TypeVar('T')
U = TypeVar('U')
D = TypeVar('D', bound='BaseDescriptor')


class HydrationError(ResourceError):
    """Data received from the API doesn't have the expected shape."""

    kind = ErrorKind.SERIALIZATION


class HydrationTypeError(HydrationError):
    """Field can't be (de-)serialized because of wrong type of its value."""

    def __init__(
        self,
        expected_types: Types,
        actual_value: Any,
        cls: Type = None,
        attr: str = None,
        msg: str = 'Wrong type',
    ) -> None:
        if not isinstance(expected_types, Sequence):
            expected_types = (expected_types,)
        self.expected_types = expected_types
        self.actual_value = actual_value
        self.cls = cls
        self.attr = attr
        self.msg = msg

    def __str__(self) -> str:
        attr_desc = ''
        if self.cls and self.attr:
            attr_desc = f' for {full_name(self.cls, self.attr)}'
        expected_types = ' or '.join(t.__name__ for t in self.expected_types)
        return f'{self.msg}{attr_desc}: expected {expected_types}, ' \
            f'got {self.actual_value!r:.50s}'


class BaseDescriptor(Generic[T]):
    """Base descriptor used to declare field on a model class.

    :param field: Override the key in the serialized dictionary. Default is
        the variable name this descriptor is assigned to.
    :param save_field: Same as *field* but only for saving (serializing).
    :param readonly: Don't allow setting the field by user code. Read-only
        fields are never sent to the API.

    Derived classes should return themselves when descriptor is used in class
    context.
    """

    def __init__(
        self,
        *, field: str = None,
        save_field: str = None,
        readonly: bool = False,
        name: str = None,
    ) -> None:
        self.field = field
        self.save_field = save_field
        self.readonly = readonly
        self.name = name

    def __set_name__(self, owner: Type[U], name: str) -> None:
        if self.name is None:
            self.name = name
        if self.field is None:
            self.field = name
        if self.save_field is None:
            self.save_field = self.field

    def is_set(self, instance: U) -> bool:
        """Check whether the field has a value (possibly `None`) on instance.

        :param instance:
        """
        return self.name in instance.__dict__


class Descriptor(BaseDescriptor[T]):
    """Simple eager field.

    Unset fields read as `None`. Deleting a field unsets it, so it's left
    out of the request body again.

    Example::

        class Model:
            foo = Descriptor()

        m = Model()
        m.foo = 3
        print(m.foo)
        del m.foo
    """

    def __get__(self, instance: U, owner: Type[U]) -> T:
        if instance is None:
            return self  # type: ignore
        return cast(T, instance.__dict__.get(self.name, None))

    def __set__(self, instance: U, value: T) -> None:
        if self.readonly:
            raise AttributeError(f'{full_name(type(instance), self.name)} '
                                 f'is read-only')
        self.set(instance, value)

    def __delete__(self, instance: U) -> None:
        instance.__dict__.pop(self.name, None)

    def set(self, instance: U, value: T) -> None:
        """Set the field.

        This method is used when deserializing and works for read-only field
        as well.

        :param instance: Model instance to set the field on.
        :param value:
        """
        instance.__dict__[self.name] = value


class Serializer(ABC, Generic[D]):
    """Abstract serializer.

    :ivar supported_descriptors: Set of descriptor types processable
        by this serializer.
    """

    supported_descriptors: AbstractSet[Type[D]] = set()

    @abstractmethod
    def load(self, descr: D, value: Any, resource: Any) -> None:
        """Deserialize value and set field on a model.

        :param descr: Descriptor instance.
        :param value: Serialized value.
        :param resource: Model instance.
        :raises HydrationTypeError:
        """
        pass

    @abstractmethod
    def dump(self, descr: D, resource: Any) -> Any:
        """Serialize field value.

        :param descr: Descriptor instance.
        :param resource: Model instance to retrieve field value from.
        :raises HydrationTypeError:
        """
        pass


class BaseTypedDescriptor(Descriptor[T]):

    typ: ClassVar[Type[T]]
    """Value type."""


@lru_cache(maxsize=None)
def typed_descriptor(typ: Type[T]) -> Type[BaseTypedDescriptor[T]]:
    r"""Return a `Descriptor` class for given value type.

    Returned class can be used to register a serializer for a typed field
    (by including it in `Serializer`.\ ``supported_descriptors``).

    :param typ:
    """
    return type(
        f'{getattr(typ, "__name__", "Any").title()}Descriptor',
        (BaseTypedDescriptor,),
        {'typ': typ, '__module__': __name__},
    )


def typed(typ: Type[T], **kwargs: Any) -> BaseTypedDescriptor[T]:
    """Declare a field holding values of *typ*.

    Example::

        class Client(Resource):
            id = typed(int)
            created_at = typed(datetime, readonly=True)

    :param typ: One of the types supported by registered serializers.
    :param kwargs: Passed to `BaseDescriptor`.
    """
    return typed_descriptor(typ)(**kwargs)


Scalar = Union[None, str, int, float, bool]


class ScalarSerializer(Serializer[BaseTypedDescriptor]):
    """Serializer for scalar fields.

    Supports `str`, `int`, `float`, `bool`, `None` (any scalar) types. Float
    fields accept ints, so amounts like ``100`` are not rejected.
    """

    _supported_types: Dict[Type[Scalar], Tuple[Type[Scalar], ...]] = {
        None: (str, int, float, bool),
        type(None): (str, int, float, bool),
        str: (str,),
        int: (int,),
        float: (float, int),
        bool: (bool,),
    }

    supported_descriptors = {
        typed_descriptor(typ)
        for typ in _supported_types
    }

    def load(
        self,
        descr: BaseTypedDescriptor[Scalar],
        value: Any,
        resource: Any,
    ) -> None:
        types = self._supported_types[descr.typ]
        if value is not None and type(value) not in types:
            raise HydrationTypeError(types, value)
        descr.set(resource, value)

    def dump(
        self,
        descr: BaseTypedDescriptor[Scalar],
        resource: Any,
    ) -> Any:
        value = descr.__get__(resource, None)
        types = self._supported_types[descr.typ]
        if value is not None and type(value) not in types:
            raise HydrationTypeError(types, value)
        return value


class DateTimeSerializer(Serializer[BaseTypedDescriptor]):
    """Serializer for `datetime.date` and `datetime.datetime` fields.

    Timestamps carry a numeric UTC offset (``2017-06-26T21:02:12+0000``);
    ``Z`` is accepted when loading. Naive datetimes are dumped as UTC.

    :param date_fmt: Format of `datetime.date`, as
        in `datetime.datetime.strptime`.
    :param datetime_fmt: Format of `datetime.datetime`, as
        in `datetime.datetime.strptime`.
    """

    supported_descriptors = {
        typed_descriptor(date),
        typed_descriptor(datetime),
    }

    def __init__(
        self,
        date_fmt: str = DATE_FORMAT,
        datetime_fmt: str = DATETIME_FORMAT,
    ) -> None:
        self.date_fmt = date_fmt
        self.datetime_fmt = datetime_fmt

    def load(
        self,
        descr: BaseTypedDescriptor[Union[date, datetime]],
        value: Any,
        resource: Any,
    ) -> None:
        if value is not None and not isinstance(value, str):
            raise HydrationTypeError(descr.typ, value)
        try:
            if value is not None:
                if descr.typ is datetime:
                    value = datetime.strptime(value, self.datetime_fmt)
                elif descr.typ is date:
                    value = datetime.strptime(value, self.date_fmt).date()
        except ValueError:
            raise HydrationTypeError(descr.typ, value, msg='Bad format')
        descr.set(resource, value)

    def dump(
        self,
        descr: BaseTypedDescriptor[Union[date, datetime]],
        resource: Any,
    ) -> Any:
        value = descr.__get__(resource, None)
        if value is not None and not isinstance(value, descr.typ):
            raise HydrationTypeError(descr.typ, value)
        ret_value = None
        if value is not None:
            if descr.typ is datetime:
                ret_value = format_datetime(value, self.datetime_fmt)
            elif descr.typ is date:
                ret_value = value.strftime(self.date_fmt)
        return ret_value


class Hydrator:
    """Load and dump resources from and to JSON dict.

    The field table of a resource class is the set of descriptors declared on
    it (and its bases), in declaration order. It is computed once per class.
    """

    def __init__(self) -> None:
        self._serializers = {}  # type: Dict[Type, Serializer]

    def add_serializer(self, serializer: Serializer) -> None:
        """Register a field serializer."""
        for typ in serializer.supported_descriptors:
            self._serializers[typ] = serializer

    def hydrate(self, resource: Any, data: Dict[str, Any]) -> None:
        """Deserialize data and set fields on resource.

        Keys without a matching field are ignored, fields missing from *data*
        are left untouched.

        :param resource: Model instance to set fields on.
        :param data: A JSON dict with serialized fields.
        :raises HydrationError:
        """
        cls = type(resource)
        if not isinstance(data, dict):
            raise HydrationTypeError(dict, data, msg=f'Bad {cls.__name__}')
        for k, descr in self.get_fields(cls).items():
            try:
                if descr.field in data:
                    serializer = self._serializers[type(descr)]
                    serializer.load(descr, data[descr.field], resource)
            except HydrationTypeError as e:
                e.cls = cls
                e.attr = k
                raise

    def dehydrate(
        self,
        resource: Any,
        only: Collection[str] = None,
    ) -> Dict[str, Any]:
        """Serialize object.

        Read-only fields and fields which are unset or `None` are left out.

        :param resource: Model instance to serialize.
        :param only: Names of fields to include, all if not given.
        """
        data: Dict[str, Any] = {}
        cls = type(resource)
        for k, descr in self.get_fields(cls).items():
            if descr.readonly or not descr.is_set(resource):
                continue
            if only is not None and k not in only:
                continue
            try:
                serializer = self._serializers[type(descr)]
                value = serializer.dump(descr, resource)
            except HydrationTypeError as e:
                e.cls = cls
                e.attr = k
                raise
            if value is not None:
                data[descr.save_field] = value
        return data

    @lru_cache(maxsize=64)
    def get_fields(self, cls: Type) -> Dict[str, BaseDescriptor]:
        """Get fields definitions from class.

        :param cls:
        """
        fields: Dict[str, BaseDescriptor] = {}
        for klass in reversed(cls.__mro__):
            for k, descr in vars(klass).items():
                if k[:1] == '_' or not isinstance(descr, BaseDescriptor):
                    continue
                if type(descr) not in self._serializers:
                    raise TypeError(f'No serializer for {full_name(cls, k)}')
                fields[k] = descr
        return fields
