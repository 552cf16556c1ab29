from __future__ import annotations

import pytest

from datastore.form_store import FormStore
from models import form
from models.form import FormState, HumidityEntry, IdSequence, SetpointGroup


@pytest.fixture()
def ids() -> IdSequence:
    return IdSequence()


def test_id_sequence_is_monotonic_across_prefixes(ids: IdSequence) -> None:
    assert [ids.group_id(), ids.humidity_id(), ids.group_id()] == ["g1", "h2", "g3"]


def test_initial_state_has_one_empty_group(ids: IdSequence) -> None:
    state = form.initial_state("7", ids, compact=False)

    assert state == FormState(system_id="7", groups=(SetpointGroup(id="g1"),), compact=False)


def test_transitions_return_new_values(ids: IdSequence) -> None:
    original = form.initial_state("1", ids)

    updated = form.set_temperature(original, "g1", "40")

    assert original.groups[0].temperature == ""
    assert updated.groups[0].temperature == "40"
    assert updated.groups[0].id == original.groups[0].id


def test_add_and_edit_humidities(ids: IdSequence) -> None:
    state = form.initial_state("1", ids)
    state = form.add_humidity(state, "g1", ids)
    state = form.add_humidity(state, "g1", ids)
    state = form.set_humidity(state, "g1", "h3", "55")

    assert state.groups[0].humidities == (HumidityEntry(id="h2"), HumidityEntry(id="h3", nominal="55"))

    state = form.remove_humidity(state, "g1", "h2")
    assert state.groups[0].humidities == (HumidityEntry(id="h3", nominal="55"),)


def test_quick_add_presets(ids: IdSequence) -> None:
    state = form.initial_state("1", ids)
    state = form.add_preset_group(state, "20-60", ids)
    state = form.add_preset_group(state, "40-33", ids)

    added = state.groups[1:]
    assert [(group.temperature, [h.nominal for h in group.humidities]) for group in added] == [
        ("20.0", ["60.0"]),
        ("40.0", ["33.0"]),
    ]


def test_unknown_preset_raises(ids: IdSequence) -> None:
    with pytest.raises(ValueError):
        form.add_preset_group(form.initial_state("1", ids), "99-99", ids)


def test_unknown_ids_raise_key_error(ids: IdSequence) -> None:
    state = form.initial_state("1", ids)

    with pytest.raises(KeyError):
        form.remove_group(state, "missing")
    with pytest.raises(KeyError):
        form.set_temperature(state, "missing", "1")
    with pytest.raises(KeyError):
        form.set_humidity(state, "g1", "missing", "1")
    with pytest.raises(KeyError):
        form.remove_humidity(state, "g1", "missing")


def test_remove_group_keeps_order(ids: IdSequence) -> None:
    state = form.initial_state("1", ids)
    state = form.add_group(state, ids)
    state = form.add_group(state, ids)

    state = form.remove_group(state, "g2")

    assert [group.id for group in state.groups] == ["g1", "g3"]


def test_load_sample(ids: IdSequence) -> None:
    state = form.set_system_id(form.initial_state("9", ids), "9")

    sample = form.load_sample(state, ids)

    assert sample.system_id == "1"
    assert [group.temperature for group in sample.groups] == ["-95.0", "0.0", "140.0", "40.0"]
    assert [h.nominal for h in sample.groups[3].humidities] == ["33.0", "80.0"]
    assert len({group.id for group in sample.groups}) == 4


def test_store_update_bumps_revision(ids: IdSequence) -> None:
    store = FormStore(form.initial_state("1", ids))

    state, revision = store.update(lambda current: form.set_system_id(current, "5"))

    assert revision == 1 == store.revision
    assert state.system_id == "5"
    assert store.get() == (state, 1)


def test_store_keeps_state_when_transition_fails(ids: IdSequence) -> None:
    initial = form.initial_state("1", ids)
    store = FormStore(initial)

    with pytest.raises(KeyError):
        store.update(lambda current: form.remove_group(current, "missing"))

    assert store.get() == (initial, 0)
