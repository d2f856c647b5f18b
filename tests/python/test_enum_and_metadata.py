"""Tests for the enum display-string toggle and dataclass field metadata."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel

from jsonmapper.codec import EnumMode, JsonMapper, json_field
from jsonmapper.codec.naming import JSON_IGNORE, JSON_NAME, field_names


class Color(enum.Enum):
    RED = "r"
    GREEN = "g"

    def __str__(self) -> str:
        return f"color-{self.value}"


class Paint(BaseModel):
    color: Color
    shades: dict[Color, int] = {}


@dataclass
class Account:
    user_name: str = json_field(name="userName", default="")
    password: str = json_field(ignore=True, default="")
    level: int = 0


@dataclass
class Team:
    title: str = ""
    members: list[Account] | None = None


def test_enums_switch_to_display_string_after_toggle() -> None:
    mapper = JsonMapper()
    paint = Paint(color=Color.GREEN, shades={Color.RED: 2})
    assert mapper.to_json(paint) == '{"color":"GREEN","shades":{"RED":2}}'

    mapper.enable_enum_use_to_string()
    assert mapper.settings.enum_mode is EnumMode.TO_STRING
    assert mapper.to_json(paint) == '{"color":"color-g","shades":{"color-r":2}}'


def test_enum_decoding_follows_toggle_state() -> None:
    mapper = JsonMapper()
    assert mapper.from_json('{"color": "GREEN"}', Paint) == Paint(color=Color.GREEN)
    assert mapper.from_json('{"color": "color-g"}', Paint) is None

    mapper.enable_enum_use_to_string()
    decoded = mapper.from_json('{"color": "color-g", "shades": {"color-r": 1}}', Paint)
    assert decoded == Paint(color=Color.GREEN, shades={Color.RED: 1})


def test_top_level_enum_round_trip() -> None:
    mapper = JsonMapper()
    assert mapper.to_json(Color.RED) == '"RED"'
    assert mapper.from_json('"RED"', Color) is Color.RED


def test_json_field_records_metadata() -> None:
    names = field_names(Account)
    assert names.renamed == {"user_name": "userName"}
    assert names.ignored == frozenset({"password"})
    assert field_names(Team).empty
    fields = {f.name: f for f in Account.__dataclass_fields__.values()}
    assert fields["user_name"].metadata[JSON_NAME] == "userName"
    assert fields["password"].metadata[JSON_IGNORE] is True


def test_field_metadata_is_ignored_until_enabled() -> None:
    mapper = JsonMapper()
    account = Account(user_name="bob", password="pw", level=2)
    assert mapper.to_json(account) == '{"user_name":"bob","password":"pw","level":2}'


def test_field_metadata_renames_and_skips_fields() -> None:
    mapper = JsonMapper()
    mapper.enable_field_metadata()
    account = Account(user_name="bob", password="pw", level=2)
    assert mapper.to_json(account) == '{"userName":"bob","level":2}'

    decoded = mapper.from_json('{"userName": "amy", "password": "x", "level": 1}', Account)
    assert decoded == Account(user_name="amy", password="", level=1)


def test_field_metadata_applies_to_nested_records() -> None:
    mapper = JsonMapper()
    mapper.enable_field_metadata()
    team = Team(title="core", members=[Account(user_name="bob")])
    text = mapper.to_json(team)
    assert text == '{"title":"core","members":[{"userName":"bob","level":0}]}'
    assert mapper.from_json(text, Team) == team
