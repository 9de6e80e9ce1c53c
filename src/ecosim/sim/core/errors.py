from __future__ import annotations


class SimulationError(Exception):
    """Base class for errors raised by the simulation core."""


class InvalidArgument(SimulationError, ValueError):
    """A command argument is outside its accepted range."""


class EmptyPopulation(SimulationError):
    """A tick was requested without enough agents or targets to act on."""

    def __init__(self, message: str, status: object = None):
        super().__init__(message)
        self.status = status


class AvatarCloneFailure(SimulationError):
    """The avatar host refused to create a clone."""


def require_name(name: str | None) -> str:
    if name is None or not str(name).strip():
        raise InvalidArgument(f"Got an empty or blank name: {name!r}")
    return str(name)


def require_count(count: int, low: int, high: int) -> int:
    try:
        value = float(count)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"Count must be a whole number, got {count!r}") from exc
    if not value.is_integer() or not low <= value <= high:
        raise InvalidArgument(f"Count must be in [{low}, {high}], got {count!r}")
    return int(value)
