# tests/core/test_aliases.py
import json

import pytest

from cmdlang_shell.core.managers.alias_manager import AliasManager


@pytest.fixture
def alias_manager(tmp_path):
    """Een AliasManager die in een tijdelijk bestand schrijft."""
    return AliasManager(tmp_path / "nested" / "aliases.json")


def test_alias_manager_empty(alias_manager):
    assert alias_manager.load_all() == []
    assert alias_manager.get("nope") is None


def test_alias_manager_save_and_get(alias_manager):
    """Een opgeslagen alias is terug te lezen en het bestand wordt aangemaakt."""
    alias_manager.save("hi", "print 'Hi $1'")
    assert alias_manager.get("hi") == "print 'Hi $1'"
    assert alias_manager.path.exists()
    data = json.loads(alias_manager.path.read_text())
    assert data[0]["name"] == "hi"


def test_alias_manager_overwrite(alias_manager):
    alias_manager.save("hi", "print one")
    alias_manager.save("hi", "print two")
    assert alias_manager.as_dict() == {"hi": "print two"}


def test_alias_manager_sorted(alias_manager):
    alias_manager.save("zeta", "print z")
    alias_manager.save("alpha", "print a")
    assert [a.name for a in alias_manager.load_all()] == ["alpha", "zeta"]


def test_alias_manager_delete(alias_manager):
    alias_manager.save("hi", "print hi")
    assert alias_manager.delete("hi") is True
    assert alias_manager.delete("hi") is False
    assert alias_manager.as_dict() == {}


def test_alias_manager_corrupt_file(alias_manager):
    """Een onleesbaar bestand geeft een lege lijst in plaats van een crash."""
    alias_manager.path.parent.mkdir(parents=True)
    alias_manager.path.write_text("not json")
    assert alias_manager.load_all() == []


def test_alias_manager_persists_between_instances(tmp_path):
    AliasManager(tmp_path / "aliases.json").save("hi", "print hi")
    assert AliasManager(tmp_path / "aliases.json").get("hi") == "print hi"
