"""Tests for JsonMapper decoding, type descriptors and round trips."""

from __future__ import annotations

import enum
import logging
from collections import OrderedDict
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

from jsonmapper.codec import JsonMapper, TypeDescriptor, non_empty_mapper
from jsonmapper.codec.engine import JsonEngine


class Color(enum.Enum):
    RED = "r"
    GREEN = "g"


@dataclass
class Bean:
    name: str = ""
    age: int = 0
    email: str | None = None
    tags: list[str] = field(default_factory=list)


class Order(BaseModel):
    order_id: int
    note: str | None = None
    quantity: int = 1
    color: Color = Color.RED
    lines: list[Bean] = []


@pytest.mark.parametrize("mapper", [JsonMapper(), non_empty_mapper()], ids=["always", "non_null"])
def test_round_trip_restores_records(mapper: JsonMapper) -> None:
    bean = Bean(name="ann", age=3, tags=["x"])
    order = Order(order_id=9, color=Color.GREEN, lines=[bean, Bean()])

    assert mapper.from_json(mapper.to_json(bean), Bean) == bean
    assert mapper.from_json(mapper.to_json(order), Order) == order


@dataclass
class Contact:
    name: str
    email: str | None


class Account(BaseModel):
    login: str
    nickname: str | None


def test_fields_skipped_as_none_decode_back_to_none() -> None:
    mapper = non_empty_mapper()
    contact = Contact(name="a", email=None)
    account = Account(login="root", nickname=None)

    assert mapper.to_json(contact) == '{"name":"a"}'
    assert mapper.from_json(mapper.to_json(contact), Contact) == contact
    assert mapper.from_json(mapper.to_json(account), Account) == account
    assert mapper.from_json("[{}]", list[Contact]) is None


def test_empty_or_absent_text_decodes_to_none() -> None:
    mapper = JsonMapper()
    assert mapper.from_json(None, Bean) is None
    assert mapper.from_json("", Bean) is None
    assert mapper.from_json("null", Bean) is None


def test_malformed_text_is_logged_and_decodes_to_none(caplog: pytest.LogCaptureFixture) -> None:
    mapper = JsonMapper(logger=logging.getLogger("tests.codec.decode"))
    with caplog.at_level(logging.WARNING, logger="tests.codec.decode"):
        assert mapper.from_json('{"name": ', Bean) is None
    assert "parse json string error" in caplog.text
    assert '{"name": ' in caplog.text


def test_shape_mismatch_decodes_to_none() -> None:
    assert JsonMapper().from_json('{"order_id": "seven"}', Order) is None
    assert JsonMapper().from_json('"ann"', Bean) is None


def test_unknown_fields_are_ignored() -> None:
    bean = JsonMapper().from_json('{"name": "ann", "height": 180}', Bean)
    assert bean == Bean(name="ann")


def test_simple_collections_decode_with_plain_types() -> None:
    mapper = JsonMapper()
    assert mapper.from_json('["a", "b"]', list) == ["a", "b"]
    assert mapper.from_json("[]", list) == []
    assert mapper.from_json('{"a": 1}', dict) == {"a": 1}


def test_collection_descriptor_decodes_nested_records() -> None:
    mapper = JsonMapper()
    descriptor = mapper.construct_collection_type(list, Bean)
    beans = mapper.from_json('[{"name": "a", "age": 1}, {"name": "b"}]', descriptor)
    assert beans == [Bean(name="a", age=1), Bean(name="b")]


def test_map_descriptor_decodes_nested_records() -> None:
    mapper = JsonMapper()
    descriptor = mapper.construct_map_type(OrderedDict, str, Order)
    orders = mapper.from_json('{"x": {"order_id": 1, "color": "GREEN"}}', descriptor)
    assert isinstance(orders, OrderedDict)
    assert orders["x"] == Order(order_id=1, color=Color.GREEN)


def test_parameterised_types_are_accepted_directly() -> None:
    beans = JsonMapper().from_json('{"k": [{"name": "a"}]}', dict[str, list[Bean]])
    assert beans == {"k": [Bean(name="a")]}


def test_enum_values_are_accepted_as_fallback() -> None:
    order = JsonMapper().from_json('{"order_id": 1, "color": "g"}', Order)
    assert order is not None
    assert order.color is Color.GREEN


def test_engine_caches_adapters() -> None:
    mapper = JsonMapper()
    engine = mapper.engine
    assert isinstance(engine, JsonEngine)
    assert engine.adapter(Bean) is engine.adapter(Bean)
    assert engine.adapter(TypeDescriptor(list[Bean])) is engine.adapter(list[Bean])
