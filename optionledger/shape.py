"""
shape.py - Count-and-type predicates over transaction inputs and outputs

Each predicate returns a Requirement: a description of the rule, whether it
holds, and the values it was judged on. Predicates never raise; the command
validators pass failing requirements to require().
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Tuple, Type

from .core import ConstraintViolation


@dataclass(frozen=True, slots=True)
class Requirement:
    """A named predicate and its outcome."""
    description: str
    satisfied: bool
    values: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.satisfied


def require(requirement: Requirement) -> None:
    """
    Raise if the requirement does not hold.

    Raises:
        ConstraintViolation: Carrying the requirement's description and values.
    """
    if not requirement.satisfied:
        raise ConstraintViolation(requirement.description, requirement.values)


def check(description: str, satisfied: bool, **values: Any) -> None:
    """Inline form of require() for content rules."""
    require(Requirement(description, bool(satisfied), values))


def _type_names(types: Tuple[type, ...]) -> str:
    return "/".join(t.__name__ for t in types)


def exactly(states: Iterable[Any], cls: Type, count: int, description: str) -> Requirement:
    """Exactly ``count`` states of type ``cls``."""
    found = sum(1 for s in states if isinstance(s, cls))
    return Requirement(description, found == count, {'expected': count, 'found': found, 'type': cls.__name__})


def at_least_one(states: Iterable[Any], cls: Type, description: str) -> Requirement:
    """At least one state of type ``cls``."""
    found = sum(1 for s in states if isinstance(s, cls))
    return Requirement(description, found >= 1, {'found': found, 'type': cls.__name__})


def none_of(states: Iterable[Any], cls: Type, description: str) -> Requirement:
    """No state of type ``cls``."""
    found = sum(1 for s in states if isinstance(s, cls))
    return Requirement(description, found == 0, {'found': found, 'type': cls.__name__})


def only_of_types(states: Iterable[Any], types: Tuple[type, ...], description: str) -> Requirement:
    """Every state is an instance of one of ``types``."""
    others = sorted({type(s).__name__ for s in states if not isinstance(s, types)})
    return Requirement(description, not others, {'allowed': _type_names(types), 'unexpected': others})


def is_empty(states: Iterable[Any], description: str) -> Requirement:
    """No states at all."""
    found = len(tuple(states))
    return Requirement(description, found == 0, {'found': found})
