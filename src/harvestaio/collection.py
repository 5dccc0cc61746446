"""One page of resources returned by a list request."""

from typing import Any, Iterable, Iterator, List, Mapping, Sequence, \
    TypeVar, Union, overload

__all__ = ('Collection',)

T = TypeVar('T')


class Collection(Sequence[T]):
    """Read-only, ordered page of objects with pagination info.

    Supports ``len()``, iteration and indexing (slicing returns a `list`).

    :param items: Objects on this page.
    :param page: Number of this page, starting from 1.
    :param total_pages:
    :param total_entries: Number of objects on all pages.
    :param per_page:
    :param next_page: Number of the next page, `None` on the last one.
    :param previous_page: Number of the previous page, `None` on the first
        one.
    """

    def __init__(
        self,
        items: Iterable[T] = (),
        page: int = 1,
        total_pages: int = 1,
        total_entries: int = None,
        per_page: int = None,
        next_page: int = None,
        previous_page: int = None,
    ) -> None:
        self._items: List[T] = list(items)
        self.page = page
        self.total_pages = total_pages
        self.total_entries = len(self._items) if total_entries is None \
            else total_entries
        self.per_page = per_page
        self.next_page = next_page
        self.previous_page = previous_page

    @classmethod
    def from_envelope(
        cls,
        items: Iterable[T],
        envelope: Mapping[str, Any],
    ) -> 'Collection[T]':
        """Create collection with pagination info taken from a list envelope.

        Missing fields get defaults describing a single, complete page.

        :param items:
        :param envelope: Envelope fields other than the items themselves.
        """
        return cls(
            items,
            page=envelope.get('page', 1),
            total_pages=envelope.get('total_pages', 1),
            total_entries=envelope.get('total_entries'),
            per_page=envelope.get('per_page'),
            next_page=envelope.get('next_page'),
            previous_page=envelope.get('previous_page'),
        )

    @property
    def has_next(self) -> bool:
        """`True` if there are more pages after this one."""
        return self.next_page is not None

    def to_list(self) -> List[T]:
        """Convert to list."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> T:
        pass

    @overload  # noqa: F811
    def __getitem__(self, index: slice) -> List[T]:
        pass

    def __getitem__(self, index: Union[int, slice]) -> Any:  # noqa: F811
        return self._items[index]

    def __repr__(self) -> str:
        return f'<{type(self).__name__} page={self.page}/' \
            f'{self.total_pages} items={len(self)}/{self.total_entries}>'

