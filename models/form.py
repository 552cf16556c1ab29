"""Immutable form state and the pure transitions applied to it."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from itertools import count
from threading import Lock
from typing import Dict, Iterable, Tuple


@dataclass(frozen=True, slots=True)
class HumidityEntry:
    id: str
    nominal: str = ""


@dataclass(frozen=True, slots=True)
class SetpointGroup:
    id: str
    temperature: str = ""
    humidities: Tuple[HumidityEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class FormState:
    """One revision of the user's form."""

    system_id: str = "1"
    groups: Tuple[SetpointGroup, ...] = ()
    compact: bool = True


@dataclass(frozen=True, slots=True)
class GroupPreset:
    temperature: str
    humidities: Tuple[str, ...] = ()


QUICK_ADD_PRESETS: Dict[str, GroupPreset] = {
    "20-60": GroupPreset(temperature="20.0", humidities=("60.0",)),
    "40-33": GroupPreset(temperature="40.0", humidities=("33.0",)),
}

SAMPLE_SYSTEM_ID = "1"
SAMPLE_GROUPS: Tuple[GroupPreset, ...] = (
    GroupPreset(temperature="-95.0"),
    GroupPreset(temperature="0.0"),
    GroupPreset(temperature="140.0"),
    GroupPreset(temperature="40.0", humidities=("33.0", "80.0")),
)


@dataclass
class IdSequence:
    """Monotonic identifiers for groups and humidity entries."""

    _counter: "count[int]" = field(default_factory=lambda: count(1))
    _lock: Lock = field(default_factory=Lock)

    def next(self, prefix: str) -> str:
        with self._lock:
            return f"{prefix}{next(self._counter)}"

    def group_id(self) -> str:
        return self.next("g")

    def humidity_id(self) -> str:
        return self.next("h")


def _group_from_preset(preset: GroupPreset, ids: IdSequence) -> SetpointGroup:
    return SetpointGroup(
        id=ids.group_id(),
        temperature=preset.temperature,
        humidities=tuple(HumidityEntry(id=ids.humidity_id(), nominal=value) for value in preset.humidities),
    )


def _find_group(state: FormState, group_id: str) -> SetpointGroup:
    for group in state.groups:
        if group.id == group_id:
            return group
    raise KeyError(f"Setpoint group {group_id!r} not found.")


def _replace_group(state: FormState, updated: SetpointGroup) -> FormState:
    groups = tuple(updated if group.id == updated.id else group for group in state.groups)
    return replace(state, groups=groups)


def initial_state(system_id: str, ids: IdSequence, compact: bool = True) -> FormState:
    return FormState(
        system_id=system_id,
        groups=(SetpointGroup(id=ids.group_id()),),
        compact=compact,
    )


def set_system_id(state: FormState, system_id: str) -> FormState:
    return replace(state, system_id=system_id)


def set_compact(state: FormState, compact: bool) -> FormState:
    return replace(state, compact=compact)


def add_group(state: FormState, ids: IdSequence) -> FormState:
    return replace(state, groups=state.groups + (SetpointGroup(id=ids.group_id()),))


def add_preset_group(state: FormState, preset_name: str, ids: IdSequence) -> FormState:
    try:
        preset = QUICK_ADD_PRESETS[preset_name]
    except KeyError:
        raise ValueError(f"Unknown quick-add preset {preset_name!r}.") from None
    return replace(state, groups=state.groups + (_group_from_preset(preset, ids),))


def remove_group(state: FormState, group_id: str) -> FormState:
    _find_group(state, group_id)
    return replace(state, groups=tuple(group for group in state.groups if group.id != group_id))


def set_temperature(state: FormState, group_id: str, temperature: str) -> FormState:
    group = _find_group(state, group_id)
    return _replace_group(state, replace(group, temperature=temperature))


def add_humidity(state: FormState, group_id: str, ids: IdSequence) -> FormState:
    group = _find_group(state, group_id)
    entry = HumidityEntry(id=ids.humidity_id())
    return _replace_group(state, replace(group, humidities=group.humidities + (entry,)))


def _find_humidity(group: SetpointGroup, humidity_id: str) -> HumidityEntry:
    for entry in group.humidities:
        if entry.id == humidity_id:
            return entry
    raise KeyError(f"Humidity entry {humidity_id!r} not found in group {group.id!r}.")


def set_humidity(state: FormState, group_id: str, humidity_id: str, nominal: str) -> FormState:
    group = _find_group(state, group_id)
    _find_humidity(group, humidity_id)
    humidities = tuple(
        replace(entry, nominal=nominal) if entry.id == humidity_id else entry
        for entry in group.humidities
    )
    return _replace_group(state, replace(group, humidities=humidities))


def remove_humidity(state: FormState, group_id: str, humidity_id: str) -> FormState:
    group = _find_group(state, group_id)
    _find_humidity(group, humidity_id)
    humidities = tuple(entry for entry in group.humidities if entry.id != humidity_id)
    return _replace_group(state, replace(group, humidities=humidities))


def load_sample(state: FormState, ids: IdSequence) -> FormState:
    return replace(state, system_id=SAMPLE_SYSTEM_ID, groups=groups_from_presets(SAMPLE_GROUPS, ids))


def groups_from_presets(presets: Iterable[GroupPreset], ids: IdSequence) -> Tuple[SetpointGroup, ...]:
    return tuple(_group_from_preset(preset, ids) for preset in presets)
