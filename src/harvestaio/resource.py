
from enum import Enum
from typing import Any, ClassVar, Optional, Type

from ._util import full_name

__all__ = ('ErrorKind', 'Resource', 'ResourceError', 'get_id_attr')


class ErrorKind(Enum):
    """Category of a failure, usable for dispatching on errors."""

    CLIENT = 'client'
    SERVER = 'server'
    TRANSPORT = 'transport'
    SERIALIZATION = 'serialization'


class ResourceError(Exception):
    """Base resource error."""

    kind: ClassVar[Optional[ErrorKind]] = None


def get_id_attr(cls: Type) -> str:
    """Get identifier attribute name of a resource class."""
    return str(getattr(getattr(cls, '_Meta', None), 'id', 'id'))


class Resource:
    """Base model class.

    Fields are declared as descriptors on the subclass. Any of them can be
    set with keyword arguments::

        client = Client(name='ABC Corp', currency='EUR')
    """

    _Meta: ClassVar[Any]

    def __init__(self, **fields: Any) -> None:
        cls = type(self)
        for k, v in fields.items():
            if k[:1] == '_' or not hasattr(cls, k):
                raise TypeError(f'{full_name(cls)} has no field {k!r}')
            setattr(self, k, v)

    def __repr__(self) -> str:
        cls = type(self)
        idattr = get_id_attr(cls)
        idvalue = getattr(self, idattr, None)
        return f'<{full_name(cls)} {idattr}={idvalue!r}>'
