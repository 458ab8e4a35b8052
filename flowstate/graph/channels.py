"""
Channels - named state fields and the store that merges updates into them.

Every field of a run's state is a Channel with its own reducer. Nodes never
write state directly; they return a partial update and the ChannelStore folds
each field of that update into the current value with the field's reducer:

    new_value = channel.reducer(current_value, update_value)

Two reducers cover every shipped graph:

- ``replace``: last write wins, unless the update is None
- ``append``: accumulate into a list (running logs, alert history)
"""

import copy
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from flowstate.graph.errors import UnknownChannelError


Reducer = Callable[[Any, Any], Any]
StateSnapshot = Mapping[str, Any]


def replace(old: Any, new: Any) -> Any:
    """Take the update unless it is None."""
    return old if new is None else new


def append(old: Any, new: Any) -> list[Any]:
    """Concatenate the update onto the current list.

    A list or tuple update is spliced in item by item; any other value is
    appended as a single item. None appends nothing.
    """
    current = list(old) if old is not None else []
    if new is None:
        return current
    if isinstance(new, (list, tuple)):
        return current + list(new)
    return current + [new]


@dataclass(frozen=True)
class Channel:
    """Specification of one state field."""

    name: str
    reducer: Reducer = replace
    default: Any = None
    default_factory: Callable[[], Any] | None = None

    def initial_value(self) -> Any:
        """Fresh default value; mutable defaults are never shared between runs."""
        if self.default_factory is not None:
            return self.default_factory()
        return copy.deepcopy(self.default)


def normalize_channels(
    channels: Iterable[Channel] | Mapping[str, Channel | Reducer | None],
) -> dict[str, Channel]:
    """Accept channels as a list of Channel or a {name: Channel | reducer} mapping."""
    result: dict[str, Channel] = {}
    if isinstance(channels, Mapping):
        for name, spec in channels.items():
            if isinstance(spec, Channel):
                if spec.name != name:
                    raise ValueError(f"Channel key '{name}' does not match channel '{spec.name}'")
                result[name] = spec
            elif spec is None:
                result[name] = Channel(name=name)
            elif callable(spec):
                result[name] = Channel(name=name, reducer=spec)
            else:
                raise TypeError(f"Channel '{name}' must be a Channel, a reducer or None")
        return result

    for channel in channels:
        if channel.name in result:
            raise ValueError(f"Channel '{channel.name}' declared twice")
        result[channel.name] = channel
    return result


class ChannelStore:
    """
    Current values of every channel for one run.

    A store is owned by exactly one run. Nodes see it only through
    ``snapshot()``, a read-only deep copy, so nothing a node does to the
    values it was handed can leak back into the store.
    """

    def __init__(self, channels: Mapping[str, Channel]):
        self._channels = dict(channels)
        self._values: dict[str, Any] = {}

    @property
    def channel_names(self) -> list[str]:
        return list(self._channels)

    def initialize(self, overrides: Mapping[str, Any] | None = None) -> None:
        """Seed every channel with its default, then merge caller-supplied values."""
        self._values = {name: ch.initial_value() for name, ch in self._channels.items()}
        if overrides:
            self.merge(overrides)

    def merge(self, update: Mapping[str, Any]) -> list[str]:
        """
        Fold a partial update into the store.

        Fields absent from ``update`` are left untouched. Every reducer runs
        before anything is stored, so an unknown field or a reducer that
        raises leaves the store exactly as it was.

        Returns:
            Names of the channels whose value changed
        """
        unknown = [key for key in update if key not in self._channels]
        if unknown:
            raise UnknownChannelError(unknown[0], list(self._channels))

        pending: dict[str, Any] = {}
        for key, value in update.items():
            pending[key] = self._channels[key].reducer(self._values[key], value)

        changed = []
        for key, new in pending.items():
            old = self._values[key]
            if new is not old and new != old:
                changed.append(key)
        self._values.update(pending)
        return changed

    def read_all(self, deep: bool = True) -> dict[str, Any]:
        """Copy of all current values; ``deep=False`` gives a shallow copy."""
        if not deep:
            return dict(self._values)
        return copy.deepcopy(self._values)

    def read(self, key: str) -> Any:
        if key not in self._channels:
            raise UnknownChannelError(key, list(self._channels))
        return self._values.get(key)

    def snapshot(self) -> StateSnapshot:
        """Immutable point-in-time view handed to nodes and decision functions."""
        return MappingProxyType(copy.deepcopy(self._values))
