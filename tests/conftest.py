"""
Shared fixtures for the combat core tests.
"""

import random

import pytest
from actors.adversary import Adversary
from actors.player import Player
from core.utils import get_random, set_random
from effects.catalogue import builtin_definitions
from effects.effect_registry import StatusEffectRegistry


@pytest.fixture(autouse=True)
def seeded_random():
    """Every test runs against its own seeded random source."""
    previous = get_random()
    rng = random.Random(1234)
    set_random(rng)
    yield rng
    set_random(previous)


@pytest.fixture
def registry():
    """A private registry holding the built-in catalogue."""
    return StatusEffectRegistry(builtin_definitions())


@pytest.fixture
def player(registry):
    return Player(name="Bell", max_hp=100, attack_power=10, max_mp=50, registry=registry)


@pytest.fixture
def adversary(registry):
    return Adversary(name="Minotaur", max_hp=80, attack_power=12, registry=registry)


@pytest.fixture
def target(registry):
    return Adversary(name="Goblin", max_hp=50, attack_power=5, registry=registry)
