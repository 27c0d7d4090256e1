"""Unit tests for the JSON helpers."""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from platform_adapter.constants import ResponseErrorCode
from platform_adapter.messaging.envelope import ErrorDetail
from platform_adapter.utils.json_utils import dumps, loads, loads_object


def test_dumps_extended_types():
    payload = {
        "amount": Decimal("19.99"),
        "at": datetime(2024, 1, 15, tzinfo=timezone.utc),
        "code": ResponseErrorCode.FORBIDDEN,
        "error": ErrorDetail(code="forbidden", message="no"),
    }

    assert json.loads(dumps(payload)) == {
        "amount": 19.99,
        "at": "2024-01-15T00:00:00+00:00",
        "code": "forbidden",
        "error": {"code": "forbidden", "message": "no"},
    }


def test_dumps_unknown_type():
    with pytest.raises(TypeError):
        dumps({"x": object()})


def test_loads():
    assert loads(b"[1, 2]") == [1, 2]


def test_loads_object():
    assert loads_object('{"a": 1}') == {"a": 1}


@pytest.mark.parametrize("raw", ["[1]", "3", "null", "{bad"])
def test_loads_object_rejects(raw):
    with pytest.raises(ValueError):
        loads_object(raw)
