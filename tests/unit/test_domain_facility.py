"""Unit tests for the damage rules shared by every facility kind."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from landbase.domain import facility
from landbase.domain.enums import OperationalCapacity, Side
from landbase.domain.errors import InvalidArgumentError, OutOfRangeError


def test_create_base_defaults():
    base = facility.create_base()
    assert base.name == "Land Base"
    assert base.side == Side.PLAYER
    assert base.damage == 0
    assert base.capacity == OperationalCapacity.FULL
    assert base.id


def test_create_base_ignores_negative_initial_damage():
    base = facility.create_base("Rear HQ", initial_damage=-5)
    assert base.damage == 0
    assert base.capacity == OperationalCapacity.FULL


def test_create_base_applies_initial_damage_with_clamp():
    base = facility.create_base("Forward HQ", Side.AI, 150)
    assert base.damage == 100
    assert base.capacity == OperationalCapacity.OUT_OF_OPERATION
    assert not facility.is_operational(base)


def test_add_damage_updates_capacity():
    base = facility.create_base("Depot Row")
    assert facility.add_damage(base, 30) == OperationalCapacity.SLIGHTLY_DEGRADED
    assert base.damage == 30
    assert facility.efficiency_multiplier(base) == pytest.approx(0.75)

    facility.add_damage(base, 200)
    assert base.damage == 100
    assert facility.efficiency_multiplier(base) == 0.0


def test_repair_damage_clamps_at_zero():
    base = facility.create_base(initial_damage=45)
    assert base.capacity == OperationalCapacity.MODERATELY_DEGRADED
    facility.repair_damage(base, 80)
    assert base.damage == 0
    assert facility.is_fully_operational(base)


def test_negative_amounts_are_rejected():
    base = facility.create_base(initial_damage=10)
    with pytest.raises(InvalidArgumentError):
        facility.add_damage(base, -1)
    with pytest.raises(InvalidArgumentError):
        facility.repair_damage(base, -5)
    assert base.damage == 10


def test_set_damage_rejects_out_of_range_values():
    base = facility.create_base()
    with pytest.raises(OutOfRangeError):
        facility.set_damage(base, 101)
    with pytest.raises(OutOfRangeError):
        facility.set_damage(base, -1)
    assert facility.set_damage(base, 61) == OperationalCapacity.HEAVILY_DEGRADED
    assert base.damage == 61


def test_out_of_range_is_a_value_error():
    with pytest.raises(ValueError):
        facility.set_damage(facility.create_base(), 500)


def test_set_name_and_side():
    base = facility.create_base("Old")
    facility.set_name(base, "New")
    facility.set_side(base, Side.AI)
    assert base.name == "New"
    assert base.side == Side.AI
    with pytest.raises(InvalidArgumentError):
        facility.set_name(base, "")


def test_clone_base_gets_new_identity():
    base = facility.create_base("Origin", Side.AI, 55)
    copy = facility.clone_base(base)
    assert copy.id != base.id
    assert (copy.name, copy.side, copy.damage, copy.capacity) == (
        base.name,
        base.side,
        base.damage,
        base.capacity,
    )


@given(
    hits=st.lists(st.integers(min_value=0, max_value=60), max_size=10),
    repairs=st.lists(st.integers(min_value=0, max_value=60), max_size=10),
)
def test_damage_always_within_bounds(hits, repairs):
    """Property-based test: damage stays in [0, 100] and capacity matches it."""
    base = facility.create_base()
    for hit, repair in zip(hits, repairs, strict=False):
        facility.add_damage(base, hit)
        facility.repair_damage(base, repair)
        assert 0 <= base.damage <= 100
        expected = facility.create_base(initial_damage=base.damage).capacity
        assert base.capacity == expected


@given(
    start=st.integers(min_value=0, max_value=100),
    amount=st.integers(min_value=0, max_value=100),
)
def test_repair_undoes_unclamped_damage(start, amount):
    """Property-based test: add then repair of equal size restores damage."""
    base = facility.create_base(initial_damage=start)
    facility.add_damage(base, amount)
    facility.repair_damage(base, amount)
    if start + amount <= 100:
        assert base.damage == start
    else:
        assert base.damage == 100 - amount
