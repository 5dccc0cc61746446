
from datetime import date, datetime, timedelta, timezone

import pytest

from harvestaio._util import *


class TestFullName:

    @pytest.mark.parametrize('args,expected', [
        ((str,), 'builtins.str'),
        ((str, 'lower'), 'builtins.str.lower'),
    ])
    def test_full_name(self, args, expected):
        assert full_name(*args) == expected


class TestFormatRecur:

    @pytest.mark.parametrize('args,kwargs,expected', [
        (('{}', 42), {}, '42'),
        (({'{0}': '{foo}foo'}, 'bar'), {'foo': 'FOO'}, {'{0}': 'FOOfoo'}),
        ((['{0.real:02d}'], 1), {}, ['01']),
        (({'uri': '/clients/{id}', 'page': 2},), {'id': 7},
         {'uri': '/clients/7', 'page': 2}),
    ])
    def test_format_recur(self, args, kwargs, expected):
        assert format_recur(*args, **kwargs) == expected

    def test_throws_on_self_referencing(self):
        d = {}
        d['foo'] = d
        with pytest.raises(ValueError):
            format_recur(d)


class TestFormatDatetime:

    def test_aware(self):
        value = datetime(2017, 6, 26, 23, 2, 12,
                         tzinfo=timezone(timedelta(hours=2)))
        assert format_datetime(value) == '2017-06-26T23:02:12+0200'

    def test_naive_is_utc(self):
        value = datetime(2017, 6, 26, 21, 2, 12)
        assert format_datetime(value) == '2017-06-26T21:02:12+0000'


class TestEncodeParams:

    def test_encode_params(self):
        assert encode_params({
            'is_active': True,
            'paid': False,
            'client_id': 5735776,
            'updated_since': datetime(2017, 6, 26, 21, 2, 12,
                                      tzinfo=timezone.utc),
            'from': date(2017, 3, 1),
            'state': 'open',
            'page': None,
        }) == {
            'is_active': 'true',
            'paid': 'false',
            'client_id': '5735776',
            'updated_since': '2017-06-26T21:02:12+0000',
            'from': '2017-03-01',
            'state': 'open',
        }
