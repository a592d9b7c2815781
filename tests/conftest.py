"""Pytest configuration and shared fixtures."""
import pytest
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from paramstate import Param

H = TypeVar('H')
I = TypeVar('I')
J = TypeVar('J')


@dataclass(frozen=True)
class S1:
    """Outer test model: four parameters and a nested S2."""
    a: Any
    b: Any
    c: Any
    d: Any
    e: Any


@dataclass(frozen=True)
class S2(Generic[H, I, J]):
    """Generic inner test model with a plain int between two parameters."""
    h: H
    i: I
    j: J


@dataclass(frozen=True)
class Pair:
    """Test model holding parameters inside a tuple."""
    x: Any
    pair: tuple


@dataclass(frozen=True)
class Grouped:
    """Six grouped parameters, used nested inside Outer."""
    a: Any
    b: Any
    c: Any
    d: Any
    e: Any
    f: Any


@dataclass(frozen=True)
class Outer:
    h: Any
    i: Any
    j: Any


@dataclass
class Plain:
    """Model without any parameters."""
    x: int = 1
    y: str = "y"


def make_s1() -> S1:
    s2 = S2(Param(99), 7, Param(100.0, bounds=(50.0, 150.0)))
    return S1(
        Param(1.0, bounds=(5.0, 15.0)),
        Param(2.0, bounds=(5.0, 15.0)),
        Param(3.0, bounds=(5.0, 15.0)),
        Param(4.0),
        s2,
    )


@pytest.fixture
def s1():
    """S1 with six parameters: vals (1.0, 2.0, 3.0, 4.0, 99, 100.0)."""
    return make_s1()


@pytest.fixture
def s1_factory():
    """Builds fresh, structurally identical S1 graphs."""
    return make_s1


@pytest.fixture
def pair_model():
    return Pair(Param(1.0, label="x"), (Param(5.0, bounds=(5.0, 15.0)), Param(6.0, bounds=(5.0, 15.0))))


@pytest.fixture
def grouped_obj():
    """Eight parameters, four tagged group='A' and four tagged group='B'."""
    inner = Grouped(
        Param(1.0, bounds=(5.0, 15.0), group='A'),
        Param(2.0, bounds=(5.0, 15.0), units=2.0, group='A'),
        Param(3.0, bounds=(5.0, 15.0), units=3.0, group='A'),
        Param(4.0, units=4.0, group='B'),
        Param(5.0, bounds=(5.0, 15.0), group='B'),
        Param(6.0, group='B'),
    )
    return Outer(
        inner,
        Param(7.0, bounds=(50.0, 150.0), units=10.0, group='A'),
        Param(8.0, group='B'),
    )


@pytest.fixture
def plain():
    return Plain()
