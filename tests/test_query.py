"""Tests for query serialization."""

import json

import pytest
from pydantic import TypeAdapter

from misp_search.query import AttributeQuery, EventQuery, MispQuery, MispRequest


def test_event_query_only_last_round_trip() -> None:
    body = EventQuery(last="1d").prepare()
    assert isinstance(body, bytes)
    assert json.loads(body) == {"request": {"last": "1d"}}


def test_empty_queries_serialize_empty_request() -> None:
    assert json.loads(EventQuery().prepare()) == {"request": {}}
    assert json.loads(AttributeQuery().prepare()) == {"request": {}}


def test_kind_tag_is_never_serialized() -> None:
    body = json.loads(AttributeQuery(kind="attribute", value="x").prepare())
    assert body == {"request": {"value": "x"}}


def test_attribute_query_uses_wire_names() -> None:
    query = AttributeQuery(
        value="203.0.113.7",
        type="ip-dst",
        from_="2021-01-01",
        to="2021-01-31",
        event_id="42",
        uuid="5ff6a1e0-0000-4000-8000-000000000001",
    )
    assert json.loads(query.prepare()) == {
        "request": {
            "value": "203.0.113.7",
            "type": "ip-dst",
            "from": "2021-01-01",
            "to": "2021-01-31",
            "eventid": "42",
            "uuid": "5ff6a1e0-0000-4000-8000-000000000001",
        }
    }


def test_event_only_filters() -> None:
    query = EventQuery(
        value="red october",
        quick_filter="october",
        with_attachments="1",
        metadata="1",
        search_all=1,
    )
    assert json.loads(query.prepare())["request"] == {
        "value": "red october",
        "quickfilter": "october",
        "withAttachments": "1",
        "metadata": "1",
        "searchall": 1,
    }


def test_search_all_zero_is_omitted() -> None:
    assert "searchall" not in json.loads(EventQuery(search_all=0, org="CIRCL").prepare())["request"]


def test_query_accepts_wire_names() -> None:
    query = EventQuery.model_validate({"from": "2021-01-01", "eventid": "3", "quickfilter": "x"})
    assert query.from_ == "2021-01-01"
    assert query.event_id == "3"
    assert query.quick_filter == "x"


def test_attribute_query_has_no_event_only_fields() -> None:
    assert not hasattr(AttributeQuery(), "quick_filter")


def test_prepare_is_compact_json() -> None:
    assert AttributeQuery(tags="tlp:red").prepare() == b'{"request":{"tags":"tlp:red"}}'


def test_query_union_discriminates_on_kind() -> None:
    adapter = TypeAdapter(MispQuery)
    assert isinstance(adapter.validate_python({"kind": "event", "last": "1d"}), EventQuery)
    assert isinstance(adapter.validate_python({"kind": "attribute"}), AttributeQuery)


def test_request_envelope_wraps_query() -> None:
    envelope = MispRequest(request=AttributeQuery(value="x"))
    assert isinstance(envelope.request, AttributeQuery)


@pytest.mark.parametrize("query_cls", [EventQuery, AttributeQuery])
def test_queries_are_frozen(query_cls: type) -> None:
    query = query_cls(last="1d")
    with pytest.raises(ValueError):
        query.last = "2d"
