"""Async client for the Harvest time tracking and invoicing API."""

from .api import HarvestAPI, HarvestRequester
from .collection import Collection
from .endpoint import Endpoint
from .endpoints import ClientContactEndpoint, ClientEndpoint, \
    InvoiceEndpoint
from .hydrator import HydrationError, HydrationTypeError
from .models import Client, ClientContact, Estimate, Invoice, \
    InvoiceLineItem, Project, Retainer, User
from .request import ClientError, HTTPError, ResponseDecodeError, \
    ServerError, TransportError
from .resource import ErrorKind, Resource, ResourceError

__all__ = (
    'HarvestAPI',
    'HarvestRequester',
    'Collection',
    'Endpoint',
    'ClientEndpoint',
    'ClientContactEndpoint',
    'InvoiceEndpoint',
    'Resource',
    'Client',
    'ClientContact',
    'Invoice',
    'InvoiceLineItem',
    'Project',
    'User',
    'Estimate',
    'Retainer',
    'ErrorKind',
    'ResourceError',
    'HydrationError',
    'HydrationTypeError',
    'ResponseDecodeError',
    'HTTPError',
    'ClientError',
    'ServerError',
    'TransportError',
)

__version__ = '0.1.0'
