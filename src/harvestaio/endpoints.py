"""Endpoints of the Harvest resources."""

from .endpoint import Endpoint
from .models import Client, ClientContact, Invoice

__all__ = ('ClientEndpoint', 'ClientContactEndpoint', 'InvoiceEndpoint')


class ClientEndpoint(Endpoint[Client]):

    resource_class = Client


class ClientContactEndpoint(Endpoint[ClientContact]):

    resource_class = ClientContact


class InvoiceEndpoint(Endpoint[Invoice]):

    resource_class = Invoice

    async def delete_line_item(
        self,
        invoice_id: int,
        line_item_id: int,
    ) -> Invoice:
        """Remove a line item from an invoice.

        :param invoice_id:
        :param line_item_id:
        :return: The invoice without the line item.
        """
        self._check_id(line_item_id)
        return await self._patch(invoice_id, {
            'line_items': {
                'id': line_item_id,
                '_destroy': True,
            },
        })
