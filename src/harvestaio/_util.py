
from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping, Set, Type, TypeVar, cast  # noqa: F401

__all__ = ('full_name', 'format_recur', 'format_datetime', 'encode_params')

T = TypeVar('T')

DATE_FORMAT = '%Y-%m-%d'
DATETIME_FORMAT = '%Y-%m-%dT%H:%M:%S%z'


def full_name(cls: Type, attr: str = None) -> str:
    """Get full name of a class or its attribute.

    :param cls:
    :param attr:
    """
    s = f'{cls.__module__}.{cls.__qualname__}'
    if attr:
        s += f'.{attr}'
    return s


def format_recur(value: T, *args: Any, **kwargs: Any) -> T:
    """Format string values using `str.format` in *value* recursively.

    Dict keys are left alone, so query parameter names and body keys can't be
    mangled.

    :param value:
    :param args: Passed to `str.format`.
    :param kwargs: Passed to `str.format`.
    """
    memo: Set[Any] = set()

    def format_value(val: Any) -> Any:
        if isinstance(val, str):
            return val.format(*args, **kwargs)
        if not isinstance(val, (list, dict)):
            return val

        val_id = id(val)
        if val_id in memo:
            raise ValueError('Self-referencing structure')
        memo.add(val_id)
        if isinstance(val, list):
            result: Any = [format_value(i) for i in val]
        if isinstance(val, dict):
            result = {k: format_value(v) for k, v in val.items()}
        memo.remove(val_id)
        return result

    return cast(T, format_value(value))


def format_datetime(value: datetime, fmt: str = DATETIME_FORMAT) -> str:
    """Format a datetime, treating naive values as UTC.

    :param value:
    :param fmt: Format as in `datetime.datetime.strftime`.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime(fmt)


def encode_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """Turn filter values into query string values.

    `None` values are dropped.

    :param params:
    """
    encoded: Dict[str, str] = {}
    for k, v in params.items():
        if v is None:
            continue
        if isinstance(v, bool):
            encoded[k] = 'true' if v else 'false'
        elif isinstance(v, datetime):
            encoded[k] = format_datetime(v)
        elif isinstance(v, date):
            encoded[k] = v.strftime(DATE_FORMAT)
        else:
            encoded[k] = str(v)
    return encoded
