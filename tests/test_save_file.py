from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List

import pytest
from pydantic import BaseModel

from savefile import (
    DecodingError,
    EncodingError,
    MissingKeyError,
    SaveFile,
    SaveFileError,
    SaveFileSettings,
)
from savefile.codec import MAX_DEPTH


@dataclass
class Player:
    health: int
    mana: int


class Inventory(BaseModel):
    gold: int
    items: List[str] = []


def test_save_file():
    save_file = SaveFile()
    save_file.add_component("player health", 100)

    assert save_file.get_component("player health", int) == 100


def test_save_file_struct():
    save_file = SaveFile()
    value = Player(health=100, mana=50)

    save_file.add_component("player", value)
    loaded = save_file.get_component("player", Player)

    assert loaded == value
    assert loaded is not value


def test_pydantic_model_and_nested_containers():
    save_file = SaveFile()
    save_file.add_component("inventory", Inventory(gold=12, items=["potion", "key"]))
    save_file.add_component("floors", {"visited": [1, 2, 3], "cleared": [1]})

    assert save_file.get_component("inventory", Inventory) == Inventory(gold=12, items=["potion", "key"])
    assert save_file.get_component("floors", Dict[str, List[int]]) == {"visited": [1, 2, 3], "cleared": [1]}


def test_component_can_be_read_as_compatible_shape():
    save_file = SaveFile()
    save_file.add_component("player", Player(health=10, mana=5))

    assert save_file.get_component("player", dict) == {"health": 10, "mana": 5}
    assert save_file.get_raw("player") == b'{"health":10,"mana":5}'


def test_overwrite_keeps_last_value():
    save_file = SaveFile()
    save_file.add_component("score", 1)
    save_file.add_component("score", 2)

    assert save_file.get_component("score", int) == 2
    assert len(save_file) == 1


def test_overwrite_with_different_shape():
    save_file = SaveFile()
    save_file.add_component("slot", 7)
    save_file.add_component("slot", "seven")

    assert save_file.get_component("slot", str) == "seven"
    with pytest.raises(DecodingError):
        save_file.get_component("slot", int)


def test_save_file_mismatched_types():
    save_file = SaveFile()
    save_file.add_component("boolean value", True)
    save_file.add_component("integer value", 100)

    with pytest.raises(DecodingError) as bool_as_int:
        save_file.get_component("boolean value", int)
    with pytest.raises(DecodingError) as int_as_bool:
        save_file.get_component("integer value", bool)

    assert bool_as_int.value.key == "boolean value"
    assert bool_as_int.value.target_type is int
    assert int_as_bool.value.key == "integer value"
    # Failed reads leave the entries intact
    assert save_file.get_component("boolean value", bool) is True
    assert save_file.get_component("integer value", int) == 100


def test_struct_mismatch_raises_decoding_error():
    save_file = SaveFile()
    save_file.add_component("player", {"health": "full"})

    with pytest.raises(DecodingError):
        save_file.get_component("player", Player)


def test_lax_decoding_allows_coercion():
    strict = SaveFile(settings=SaveFileSettings(strict=True))
    lax = SaveFile(settings=SaveFileSettings(strict=False))
    for store in (strict, lax):
        store.add_component("level", "42")

    with pytest.raises(DecodingError):
        strict.get_component("level", int)
    assert lax.get_component("level", int) == 42


def test_many_values():
    save_file = SaveFile()
    for i in range(10000):
        save_file.add_component(f"key {i}", i)

    assert len(save_file) == 10000
    for i in range(10000):
        assert save_file.get_component(f"key {i}", int) == i


def test_missing_key_raises():
    save_file = SaveFile()
    save_file.add_component("present", 1)

    with pytest.raises(MissingKeyError) as excinfo:
        save_file.get_component("absent", int)

    assert isinstance(excinfo.value, KeyError)
    assert isinstance(excinfo.value, SaveFileError)
    assert excinfo.value.key == "absent"
    assert "absent" in str(excinfo.value)
    assert save_file.keys() == ["present"]


def test_missing_key_with_explicit_default():
    save_file = SaveFile()
    assert save_file.get_component("absent", int, default=-1) == -1
    assert save_file.get_component("absent", int, default=None) is None


@pytest.mark.parametrize(
    "bad_value",
    [float("nan"), [1.0, math.inf], object()],
    ids=["nan", "inf-in-list", "unsupported-type"],
)
def test_failed_insert_keeps_previous_value(bad_value):
    save_file = SaveFile()
    save_file.add_component("value", 5)

    with pytest.raises(EncodingError) as excinfo:
        save_file.add_component("value", bad_value)

    assert excinfo.value.key == "value"
    assert save_file.get_component("value", int) == 5


def test_cyclic_value_is_rejected():
    save_file = SaveFile()
    cyclic: list = [1]
    cyclic.append(cyclic)

    with pytest.raises(EncodingError):
        save_file.add_component("loop", cyclic)
    assert not save_file.has_component("loop")


def test_non_string_key_rejected():
    save_file = SaveFile()
    with pytest.raises(TypeError):
        save_file.add_component(1, "one")  # type: ignore[arg-type]


def test_membership_and_removal():
    save_file = SaveFile()
    save_file.add_component("a", 1)
    save_file.add_component("b", 2)

    assert "a" in save_file
    assert save_file.has_component("b")
    assert sorted(save_file.keys()) == ["a", "b"]

    save_file.remove_component("a")
    assert "a" not in save_file
    assert len(save_file) == 1
    with pytest.raises(MissingKeyError):
        save_file.remove_component("a")
    with pytest.raises(MissingKeyError):
        save_file.get_raw("a")


def test_set_namespace_keeps_entries():
    save_file = SaveFile("studio")
    save_file.add_component("a", 1)

    save_file.set_namespace("other-studio")

    assert save_file.namespace == "other-studio"
    assert save_file.get_component("a", int) == 1

    save_file.set_namespace(None)
    assert save_file.namespace is None


def test_empty_namespace_rejected():
    with pytest.raises(ValueError):
        SaveFile("")
    save_file = SaveFile("ok")
    with pytest.raises(ValueError):
        save_file.set_namespace("")
    assert save_file.namespace == "ok"


def _nested(depth: int):
    value: object = 1
    for _ in range(depth):
        value = [value]
    return value


def test_too_deeply_nested_value_rejected_at_insert():
    save_file = SaveFile()
    save_file.add_component("tree", [1])

    with pytest.raises(EncodingError) as excinfo:
        save_file.add_component("tree", _nested(200))

    assert "nested deeper" in str(excinfo.value)
    assert save_file.get_component("tree", list) == [1]


def test_deepest_allowed_value_round_trips(tmp_path):
    save_file = SaveFile()
    save_file.add_component("tree", _nested(MAX_DEPTH))
    save_file.add_component("other", 7)

    assert save_file.get_component("tree", list) == _nested(MAX_DEPTH)
    loaded = SaveFile.load_from_file(save_file.save_to_file(tmp_path / "deep.json"))
    assert loaded.get_component("tree", list) == _nested(MAX_DEPTH)
    assert loaded.get_component("other", int) == 7


def test_bytes_components_must_be_utf8():
    save_file = SaveFile()
    save_file.add_component("text", b"abc")
    assert save_file.get_component("text", bytes) == b"abc"

    with pytest.raises(EncodingError):
        save_file.add_component("text", b"\x00\xff")
    assert save_file.get_component("text", bytes) == b"abc"
