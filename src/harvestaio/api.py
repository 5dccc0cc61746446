"""Harvest API entry point."""

import os
from typing import Any, Mapping, Sequence

import aiohttp

from .endpoints import ClientContactEndpoint, ClientEndpoint, \
    InvoiceEndpoint
from .hydrator import Serializer
from .manager_factory import create_manager
from .request import Requester

__all__ = ('DEFAULT_BASE_URL', 'DEFAULT_USER_AGENT', 'HarvestRequester',
           'HarvestAPI')

DEFAULT_BASE_URL = 'https://api.harvestapp.com/v2'
DEFAULT_USER_AGENT = 'harvestaio'


class HarvestRequester(Requester):
    """`.Requester` sending Harvest account and token headers.

    :param session: `aiohttp` client session.
    :param account_id:
    :param access_token: Personal access token or OAuth2 token.
    :param base_url:
    :param user_agent: Harvest asks for an app name and a contact.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        account_id: Any,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        super().__init__(base_url, session, headers={
            'Authorization': f'Bearer {access_token}',
            'Harvest-Account-Id': str(account_id),
            'User-Agent': user_agent,
            'Accept': 'application/json',
        })


class HarvestAPI:
    """All Harvest endpoints sharing one session.

    Example::

        async with aiohttp.ClientSession() as session:
            api = HarvestAPI(session, account_id, token)
            invoices = await api.invoices.list(state='open')

    :param session: `aiohttp` client session, owned by the caller.
    :param account_id:
    :param access_token:
    :param base_url:
    :param user_agent:
    :param custom_serializers: Additional serializers for the `.Hydrator`.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        account_id: Any,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        custom_serializers: Sequence[Serializer] = (),
    ) -> None:
        self.session = session
        requester = HarvestRequester(
            session, account_id, access_token,
            base_url=base_url, user_agent=user_agent,
        )
        self.manager = create_manager(requester, custom_serializers)
        self.clients = ClientEndpoint(self.manager)
        self.contacts = ClientContactEndpoint(self.manager)
        self.invoices = InvoiceEndpoint(self.manager)

    @classmethod
    def from_env(
        cls,
        session: aiohttp.ClientSession,
        environ: Mapping[str, str] = None,
    ) -> 'HarvestAPI':
        """Create API with settings from environment variables.

        ``HARVEST_ACCOUNT_ID`` and ``HARVEST_ACCESS_TOKEN`` are required,
        ``HARVEST_BASE_URL`` and ``HARVEST_USER_AGENT`` are optional.

        :param session:
        :param environ: Defaults to `os.environ`.
        :raises ValueError: When a required variable is missing.
        """
        if environ is None:
            environ = os.environ
        try:
            account_id = environ['HARVEST_ACCOUNT_ID']
            access_token = environ['HARVEST_ACCESS_TOKEN']
        except KeyError as e:
            raise ValueError(
                f'Environment variable {e.args[0]} is not set',
            ) from e
        return cls(
            session, account_id, access_token,
            base_url=environ.get('HARVEST_BASE_URL', DEFAULT_BASE_URL),
            user_agent=environ.get('HARVEST_USER_AGENT', DEFAULT_USER_AGENT),
        )
