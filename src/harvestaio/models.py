"""Harvest resources."""

from datetime import date, datetime

from .hydrator import typed
from .relation import ManyToOne, OneToMany
from .resource import Resource

__all__ = (
    'User',
    'Project',
    'Estimate',
    'Retainer',
    'Client',
    'ClientContact',
    'InvoiceLineItem',
    'Invoice',
)


class User(Resource):
    """Reference to a user, as embedded in other resources."""

    id = typed(int)
    name = typed(str)


class Project(Resource):
    """Reference to a project, as embedded in invoice line items."""

    id = typed(int)
    name = typed(str)
    code = typed(str)


class Estimate(Resource):
    id = typed(int)


class Retainer(Resource):
    id = typed(int)


class Client(Resource):

    id = typed(int)
    name = typed(str)
    is_active = typed(bool)
    address = typed(str)
    statement_key = typed(str, readonly=True)
    currency = typed(str)
    created_at = typed(datetime)
    updated_at = typed(datetime)

    class _Meta:
        uri = '/clients'
        key = 'clients'


class ClientContact(Resource):
    """Contact person of a client.

    The client is embedded as ``{"id": ..., "name": ...}``.
    """

    id = typed(int)
    client_id = typed(int)
    client = ManyToOne(Client, save_fields=('id', 'name'))
    title = typed(str)
    first_name = typed(str)
    last_name = typed(str)
    email = typed(str)
    phone_office = typed(str)
    phone_mobile = typed(str)
    fax = typed(str)
    created_at = typed(datetime)
    updated_at = typed(datetime)

    class _Meta:
        uri = '/contacts'
        key = 'contacts'


class InvoiceLineItem(Resource):

    id = typed(int)
    project = ManyToOne(
        Project, save_by_value=False, save_field='project_id',
    )
    kind = typed(str)
    description = typed(str)
    quantity = typed(float)
    unit_price = typed(float)
    amount = typed(float, readonly=True)
    taxed = typed(bool)
    taxed2 = typed(bool)


class Invoice(Resource):
    """Invoice with its line items.

    Amounts computed by Harvest (``due_amount``, ``tax_amount``, ...) and
    state timestamps are read-only and never sent.
    """

    id = typed(int)
    client_id = typed(int)
    client = ManyToOne(Client, save_fields=('id', 'name'))
    line_items = OneToMany(InvoiceLineItem)
    estimate = ManyToOne(Estimate, readonly=True)
    retainer = ManyToOne(Retainer, readonly=True)
    creator = ManyToOne(User, readonly=True)
    client_key = typed(str)
    number = typed(str)
    purchase_order = typed(str)
    amount = typed(float)
    due_amount = typed(float, readonly=True)
    tax = typed(float)
    tax_amount = typed(float, readonly=True)
    tax2 = typed(float)
    tax2_amount = typed(float, readonly=True)
    discount = typed(float)
    discount_amount = typed(float, readonly=True)
    subject = typed(str)
    notes = typed(str)
    currency = typed(str)
    state = typed(str, readonly=True)
    period_start = typed(date)
    period_end = typed(date)
    issue_date = typed(date)
    due_date = typed(date)
    payment_term = typed(str)
    sent_at = typed(datetime, readonly=True)
    paid_at = typed(datetime, readonly=True)
    paid_date = typed(date, readonly=True)
    closed_at = typed(datetime, readonly=True)
    created_at = typed(datetime)
    updated_at = typed(datetime)

    class _Meta:
        uri = '/invoices'
        key = 'invoices'
