"""
Actor model.

The shared combatant container and its two kinds: the player, driven by
input, and adversaries, driven by a decision policy.
"""

from .main import Actor, ActorSnapshot
from .player import Player, StruggleResult
from .adversary import Adversary, Policy
