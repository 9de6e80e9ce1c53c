"""In-memory avatar and asset host used by the headless runner, the server and tests."""
from __future__ import annotations

import hashlib
from typing import Dict, List, Optional

from ..utils.math2d import clamp
from .errors import InvalidArgument, require_name

EFFECT_LIMITS = {
    "ghost": (0.0, 100.0),
    "brightness": (-100.0, 100.0),
}
EFFECT_NAMES = ("color", "fisheye", "whirl", "pixelate", "mosaic", "brightness", "ghost")


class Sprite:
    def __init__(self, stage: "Stage", sprite_id: str, name: str, x: float = 0.0, y: float = 0.0,
                 is_template: bool = True, template_id: Optional[str] = None):
        self.stage = stage
        self.id = sprite_id
        self.name = name
        self.x = float(x)
        self.y = float(y)
        self.direction = 90.0
        self.visible = True
        self.is_template = is_template
        self.template_id = template_id if template_id is not None else sprite_id
        self.costume: Optional[str] = None
        self.size = 100.0
        self.bubble: Optional[str] = None
        self.effects: Dict[str, float] = {name: 0.0 for name in EFFECT_NAMES}
        self.disposed = False

    def __repr__(self) -> str:
        return f"Sprite(id={self.id!r}, name={self.name!r}, x={self.x:.1f}, y={self.y:.1f})"

    def set_xy(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def set_direction(self, degrees: float) -> None:
        wrapped = (degrees + 180.0) % 360.0 - 180.0
        self.direction = 180.0 if wrapped == -180.0 else wrapped

    def get_effect(self, name: str) -> float:
        return self.effects.get(name.lower(), 0.0)

    def set_effect(self, name: str, value: float) -> None:
        effect = name.lower()
        if effect not in self.effects:
            return
        low, high = EFFECT_LIMITS.get(effect, (float("-inf"), float("inf")))
        self.effects[effect] = clamp(value, low, high)

    def clear_effects(self) -> None:
        for name in self.effects:
            self.effects[name] = 0.0

    def set_visible(self, visible: bool) -> None:
        self.visible = bool(visible)

    def set_size(self, percent: float) -> None:
        self.size = float(percent)

    def say(self, text: str) -> None:
        self.bubble = str(text) if text else None

    def clone(self) -> Optional["Sprite"]:
        return self.stage.make_clone(self)


class Stage:
    """Holds sprites and published costume assets."""

    def __init__(self, clone_limit: int = 300):
        self.clone_limit = clone_limit
        self.running = True
        self.assets: Dict[str, bytes] = {}
        self._sprites: Dict[str, Sprite] = {}
        self._next_id = 0

    @property
    def sprites(self) -> List[Sprite]:
        return list(self._sprites.values())

    @property
    def clone_count(self) -> int:
        return sum(1 for sprite in self._sprites.values() if not sprite.is_template)

    def _new_id(self) -> str:
        self._next_id += 1
        return f"sprite-{self._next_id:05d}"

    def add_sprite(self, name: str, x: float = 0.0, y: float = 0.0) -> Sprite:
        name = require_name(name)
        if any(s.is_template and s.name == name for s in self._sprites.values()):
            raise InvalidArgument(f"A sprite named {name!r} already exists")
        sprite = Sprite(self, self._new_id(), name, x, y)
        self._sprites[sprite.id] = sprite
        return sprite

    def get_sprite(self, name: str) -> Sprite:
        name = require_name(name)
        for sprite in self._sprites.values():
            if sprite.is_template and sprite.name == name:
                return sprite
        raise InvalidArgument(f"No sprite named {name!r}")

    def get_by_id(self, sprite_id: str) -> Optional[Sprite]:
        return self._sprites.get(sprite_id)

    def make_clone(self, source: Sprite) -> Optional[Sprite]:
        if source.disposed or self.clone_count >= self.clone_limit:
            return None
        clone = Sprite(self, self._new_id(), source.name, source.x, source.y,
                       is_template=False, template_id=source.template_id)
        clone.direction = source.direction
        clone.visible = source.visible
        clone.costume = source.costume
        clone.size = source.size
        clone.effects = dict(source.effects)
        self._sprites[clone.id] = clone
        return clone

    def clones_of(self, template: Sprite) -> List[Sprite]:
        return [s for s in self._sprites.values() if not s.is_template and s.template_id == template.id]

    def dispose(self, avatar: Sprite) -> None:
        if avatar.is_template:
            return
        avatar.disposed = True
        self._sprites.pop(avatar.id, None)

    def stop_for(self, avatar: Sprite) -> None:
        # Sprites run no scripts of their own here; nothing to stop.
        return None

    def stop_all(self) -> None:
        self.running = False

    def create_asset(self, data_format: str, data: bytes) -> str:
        asset_id = hashlib.md5(data).hexdigest()
        self.assets[f"{asset_id}.{data_format}"] = data
        return f"{asset_id}.{data_format}"

    def attach_costume(self, avatar: Sprite, asset_id: str) -> None:
        avatar.costume = asset_id
