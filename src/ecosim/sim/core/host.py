"""Contracts the simulation core expects from its rendering and asset hosts."""
from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class Avatar(Protocol):
    id: str
    is_template: bool
    x: float
    y: float
    visible: bool

    def set_xy(self, x: float, y: float) -> None: ...

    def set_direction(self, degrees: float) -> None: ...

    def get_effect(self, name: str) -> float: ...

    def set_effect(self, name: str, value: float) -> None: ...

    def clear_effects(self) -> None: ...

    def set_visible(self, visible: bool) -> None: ...

    def set_size(self, percent: float) -> None: ...

    def say(self, text: str) -> None: ...

    def clone(self) -> Optional["Avatar"]: ...


class AvatarHost(Protocol):
    def dispose(self, avatar: Avatar) -> None: ...

    def stop_for(self, avatar: Avatar) -> None: ...

    def stop_all(self) -> None: ...

    def clones_of(self, template: Avatar) -> List[Avatar]: ...


class AssetStore(Protocol):
    def create_asset(self, data_format: str, data: bytes) -> str: ...

    def attach_costume(self, avatar: Avatar, asset_id: str) -> None: ...
