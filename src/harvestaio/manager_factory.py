"""`.ResourceManager` factory."""

from typing import List, Sequence  # noqa: F401

from .hydrator import DateTimeSerializer, Hydrator, ScalarSerializer, \
    Serializer
from .manager import ResourceManager
from .relation import ManyToOneSerializer, OneToManySerializer
from .request import Requester

__all__ = ('create_hydrator', 'create_manager')


def create_hydrator(
    custom_serializers: Sequence[Serializer] = (),
) -> Hydrator:
    """Create new `.Hydrator` with the default serializers registered.

    :param custom_serializers: Additional serializers, registered last so
        they can replace the default ones.
    """
    hydrator = Hydrator()
    serializers: List[Serializer] = [
        ScalarSerializer(),
        DateTimeSerializer(),
        OneToManySerializer(hydrator),
        ManyToOneSerializer(hydrator),
    ]
    serializers.extend(custom_serializers)
    for serializer in serializers:
        hydrator.add_serializer(serializer)
    return hydrator


def create_manager(
    requester: Requester,
    custom_serializers: Sequence[Serializer] = (),
) -> ResourceManager:
    """Create new `.ResourceManager`.

    :param requester:
    :param custom_serializers: Additional serializer to register with
        the `.Hydrator`.
    """
    return ResourceManager(requester, create_hydrator(custom_serializers))
