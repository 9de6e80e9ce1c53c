from __future__ import annotations

import hashlib

import pytest

from ecosim.sim.core.errors import InvalidArgument
from ecosim.sim.core.host import Avatar
from ecosim.sim.core.stage import Stage


def test_sprite_satisfies_avatar_protocol(stage):
    assert isinstance(stage.add_sprite("Organism"), Avatar)


def test_add_sprite_rejects_blank_and_duplicate_names(stage):
    stage.add_sprite("Food")
    with pytest.raises(InvalidArgument):
        stage.add_sprite("Food")
    with pytest.raises(InvalidArgument):
        stage.add_sprite("   ")
    with pytest.raises(InvalidArgument):
        stage.get_sprite("Missing")


def test_clone_copies_state_and_respects_limit():
    stage = Stage(clone_limit=1)
    template = stage.add_sprite("Organism", 3, 4)
    template.set_effect("fisheye", 12)
    template.set_direction(45)

    clone = template.clone()
    assert clone is not None
    assert not clone.is_template
    assert (clone.x, clone.y) == (3, 4)
    assert clone.get_effect("fisheye") == 12
    assert clone.direction == 45
    assert stage.clones_of(template) == [clone]
    assert template.clone() is None


def test_dispose_removes_clones_only(stage):
    template = stage.add_sprite("Organism")
    clone = template.clone()
    stage.dispose(template)
    stage.dispose(clone)
    assert stage.get_by_id(template.id) is template
    assert stage.get_by_id(clone.id) is None
    assert clone.disposed
    assert clone.clone() is None


def test_effects_are_clamped_and_direction_wrapped(stage):
    sprite = stage.add_sprite("Organism")
    sprite.set_effect("ghost", 140)
    sprite.set_effect("brightness", -300)
    assert sprite.get_effect("ghost") == 100
    assert sprite.get_effect("brightness") == -100
    sprite.set_direction(270)
    assert sprite.direction == -90
    sprite.set_direction(-180)
    assert sprite.direction == 180


def test_assets_are_content_addressed(stage):
    sprite = stage.add_sprite("Organism")
    data = b"<svg></svg>"
    asset_id = stage.create_asset("svg", data)
    assert asset_id == hashlib.md5(data).hexdigest() + ".svg"
    stage.attach_costume(sprite, asset_id)
    assert sprite.costume == asset_id
    assert stage.assets[asset_id] == data


def test_say_and_size_carry_over_to_clones(stage):
    template = stage.add_sprite("Organism")
    template.set_size(55)
    template.say("hi")
    clone = template.clone()
    assert clone.size == 55
    assert clone.bubble is None
    assert template.bubble == "hi"
    template.say("")
    assert template.bubble is None
