"""
Actor module for the simulator.

Defines the Actor class, the shared resource holder that both the player and
every adversary build on: health, mana, attack power, a status effect manager
and the predicates derived from it.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.constants import MP_REGEN_DIVISOR, PlayerState, StatusEffectType
from core.error_handling import ensure_non_negative_int
from core.logging import log_debug
from core.utils import percentage
from effects.effect_manager import EffectManagerSnapshot, StatusEffectManager
from effects.effect_registry import StatusEffectRegistry
from effects.player_state import derive_player_state


class ActorSnapshot(BaseModel):
    """Plain serializable state of an actor, for save games."""

    name: str
    display_name: str
    hp: int
    max_hp: int
    mp: int
    max_mp: int
    attack_power: int
    defense: int
    stun_turns: int = 0
    status_effects: EffectManagerSnapshot = Field(default_factory=EffectManagerSnapshot)


class Actor:
    """
    Represents a combatant, holding its resource pools and status effects.

    Attributes:
        name (str):
            The identifier of the actor.
        display_name (str):
            The name shown in log lines, may change (e.g. on transformation).
        hp (int):
            Current health, always within [0, max_hp].
        max_hp (int):
            Maximum health, never negative.
        mp (int):
            Current mana, always within [0, max_mp].
        max_mp (int):
            Maximum mana, never negative.
        attack_power (int):
            Base attack power before status modifiers.
        defense (int):
            Flat defense used by the default damage formula.
        stun_turns (int):
            Turns left during which the actor cannot act, counted down at
            turn start.
        status_effects (StatusEffectManager):
            The active status effects of the actor.

    """

    def __init__(
        self,
        name: str,
        max_hp: int,
        attack_power: int,
        max_mp: int = 0,
        defense: int = 0,
        display_name: str | None = None,
        registry: StatusEffectRegistry | None = None,
    ) -> None:
        self.name = name
        self.display_name = display_name or name
        self.max_hp = ensure_non_negative_int(max_hp, "max_hp", {"actor": name})
        self.hp = self.max_hp
        self.max_mp = ensure_non_negative_int(max_mp, "max_mp", {"actor": name})
        self.mp = self.max_mp
        self.attack_power = ensure_non_negative_int(attack_power, "attack_power", {"actor": name})
        self.defense = ensure_non_negative_int(defense, "defense", {"actor": name})
        self.stun_turns = 0

        # Remember the starting values for full restores.
        self.initial_max_hp = self.max_hp
        self.initial_max_mp = self.max_mp
        self.initial_attack_power = self.attack_power
        self.initial_display_name = self.display_name

        self.status_effects = StatusEffectManager(owner=self, registry=registry)

    # ============================================================================
    # HEALTH
    # ============================================================================

    def take_damage(self, amount: int) -> int:
        """
        Applies damage, scaled by the damage-received modifier of the active
        effects. Reaching 0 health knocks the actor out.

        Args:
            amount (int): The incoming damage before modifiers.

        Returns:
            int: The health actually removed, never more than the current health.

        """
        amount = ensure_non_negative_int(amount, "damage", {"actor": self.name})
        if amount == 0:
            return 0
        scaled = int(amount * self.status_effects.get_damage_modifier())
        actual = min(self.hp, max(0, scaled))
        self.hp -= actual
        log_debug(
            f"{self.display_name} takes {actual} damage",
            {"raw": amount, "scaled": scaled, "hp": self.hp},
        )
        if self.hp == 0:
            self._on_health_depleted()
        return actual

    def _on_health_depleted(self) -> None:
        if self.is_knocked_out() or self.is_doomed():
            return
        self.status_effects.add_effect(StatusEffectType.KNOCKED_OUT)

    def heal(self, amount: int) -> int:
        """
        Restores health up to the maximum. Healing an actor at 0 health
        brings it back from being knocked out.

        Args:
            amount (int): The health to restore.

        Returns:
            int: The health actually restored.

        """
        amount = ensure_non_negative_int(amount, "heal", {"actor": self.name})
        if amount == 0 or self.hp >= self.max_hp:
            return 0
        old_hp = self.hp
        self.hp = min(self.max_hp, self.hp + amount)
        if old_hp == 0 and self.hp > 0:
            self.status_effects.remove_effect(StatusEffectType.KNOCKED_OUT)
        return self.hp - old_hp

    def heal_from_damage(self, dealt: int, ratio: float) -> int:
        """
        Heals a share of the damage the actor just dealt.

        Args:
            dealt (int): The damage dealt.
            ratio (float): The share to convert into health.

        Returns:
            int: The health actually restored.

        """
        if dealt <= 0 or ratio <= 0:
            return 0
        return self.heal(int(dealt * ratio))

    def gain_max_hp(self, amount: int) -> int:
        """Raises both maximum and current health by the same amount."""
        amount = ensure_non_negative_int(amount, "max_hp gain", {"actor": self.name})
        self.max_hp += amount
        self.hp += amount
        return amount

    def lose_max_hp(self, amount: int) -> int:
        """
        Lowers maximum health, clamping current health to it.

        A maximum driven to 0 dooms the actor: it can no longer be knocked out
        and waits for a finishing move.

        Args:
            amount (int): The maximum health to remove.

        Returns:
            int: The maximum health actually removed.

        """
        amount = ensure_non_negative_int(amount, "max_hp loss", {"actor": self.name})
        actual = min(self.max_hp, amount)
        self.max_hp -= actual
        self.hp = min(self.hp, self.max_hp)
        if self.max_hp == 0 and not self.is_doomed():
            self.status_effects.remove_effect(StatusEffectType.KNOCKED_OUT)
            self.status_effects.add_effect(StatusEffectType.DOOMED)
        return actual

    # ============================================================================
    # MANA
    # ============================================================================

    def recover_mp(self, amount: int) -> int:
        amount = ensure_non_negative_int(amount, "mp recovery", {"actor": self.name})
        old_mp = self.mp
        self.mp = min(self.max_mp, self.mp + amount)
        return self.mp - old_mp

    def lose_mp(self, amount: int) -> int:
        amount = ensure_non_negative_int(amount, "mp loss", {"actor": self.name})
        actual = min(self.mp, amount)
        self.mp -= actual
        return actual

    def consume_mp(self, amount: int) -> bool:
        """
        Spends mana. Spending more than is available drains what is left and
        exhausts the actor.

        Args:
            amount (int): The mana to spend.

        Returns:
            bool: True if the actor could pay in full.

        """
        amount = ensure_non_negative_int(amount, "mp cost", {"actor": self.name})
        if self.mp >= amount:
            self.mp -= amount
            return True
        self.mp = 0
        self.status_effects.add_effect(StatusEffectType.EXHAUSTED)
        log_debug(f"{self.display_name} is exhausted", {"cost": amount})
        return False

    def gain_max_mp(self, amount: int) -> int:
        amount = ensure_non_negative_int(amount, "max_mp gain", {"actor": self.name})
        self.max_mp += amount
        self.mp += amount
        return amount

    def lose_max_mp(self, amount: int) -> int:
        amount = ensure_non_negative_int(amount, "max_mp loss", {"actor": self.name})
        actual = min(self.max_mp, amount)
        self.max_mp -= actual
        self.mp = min(self.mp, self.max_mp)
        return actual

    # ============================================================================
    # STATS AND PREDICATES
    # ============================================================================

    def get_attack_power(self) -> int:
        """Returns the attack power after status modifiers, rounded down."""
        return int(self.attack_power * self.status_effects.get_attack_modifier())

    def get_hp_percentage(self) -> float:
        return percentage(self.hp, self.max_hp)

    def get_mp_percentage(self) -> float:
        return percentage(self.mp, self.max_mp)

    def can_act(self) -> bool:
        """Whether the actor may take an action this turn."""
        return self.stun_turns == 0 and self.hp > 0 and self.status_effects.can_act()

    def can_use_skills(self) -> bool:
        return self.status_effects.can_use_skills()

    def is_knocked_out(self) -> bool:
        return self.status_effects.is_knocked_out()

    def is_restrained(self) -> bool:
        return self.status_effects.is_restrained()

    def is_eaten(self) -> bool:
        return self.status_effects.is_eaten()

    def is_cocoon(self) -> bool:
        return self.status_effects.is_cocoon()

    def is_any_restrained(self) -> bool:
        """Restrained, wrapped in a cocoon, or swallowed."""
        return self.is_restrained() or self.is_cocoon() or self.is_eaten()

    def is_doomed(self) -> bool:
        return self.status_effects.is_doomed()

    def is_dead(self) -> bool:
        return self.status_effects.is_dead()

    def is_stunned(self) -> bool:
        return self.stun_turns > 0 or self.status_effects.has_effect(StatusEffectType.STUNNED)

    def is_defeated(self) -> bool:
        return self.is_knocked_out() or self.is_doomed() or self.is_dead()

    def get_player_state(self) -> PlayerState:
        """Returns the state derived from the currently active effects."""
        return derive_player_state(self.status_effects.active_kinds())

    # ============================================================================
    # TURN PROCESSING
    # ============================================================================

    def stun(self, turns: int) -> None:
        """Keeps the actor from acting for the given number of turn starts."""
        turns = ensure_non_negative_int(turns, "stun turns", {"actor": self.name})
        self.stun_turns = max(self.stun_turns, turns)

    def start_turn(self) -> list[str]:
        """
        Counts the stun down and regenerates a tenth of the maximum mana,
        unless the actor has been swallowed.

        Returns:
            list[str]: Log lines.

        """
        messages: list[str] = []
        if self.stun_turns > 0:
            self.stun_turns -= 1
            if self.stun_turns == 0:
                messages.append(f"{self.display_name} recovers from the stun.")
        if self.max_mp > 0 and not self.is_eaten():
            self.recover_mp(self.max_mp // MP_REGEN_DIVISOR)
        return messages

    def process_round_end(self) -> list[str]:
        """
        Ticks the status effects: periodic effects first, then durations.

        Returns:
            list[str]: Log lines produced by the ticks and expiries.

        """
        messages = self.status_effects.apply_effects(self)
        messages.extend(self.status_effects.decrease_durations(self))
        return messages

    # ============================================================================
    # RESET AND SERIALIZATION
    # ============================================================================

    def full_restore(self) -> None:
        """Restores health and mana to full and clears every effect."""
        self.hp = self.max_hp
        self.mp = self.max_mp
        self.stun_turns = 0
        self.status_effects.clear_all_effects()

    def reset_battle_state(self) -> None:
        """Returns the actor to its starting values for a new battle."""
        self.max_hp = self.initial_max_hp
        self.max_mp = self.initial_max_mp
        self.attack_power = self.initial_attack_power
        self.display_name = self.initial_display_name
        self.full_restore()

    def to_snapshot(self) -> ActorSnapshot:
        return ActorSnapshot(
            name=self.name,
            display_name=self.display_name,
            hp=self.hp,
            max_hp=self.max_hp,
            mp=self.mp,
            max_mp=self.max_mp,
            attack_power=self.attack_power,
            defense=self.defense,
            stun_turns=self.stun_turns,
            status_effects=self.status_effects.to_snapshot(),
        )

    def restore_snapshot(self, snapshot: ActorSnapshot | dict[str, Any]) -> None:
        """
        Restores the actor from a snapshot, clamping pools into range.

        Args:
            snapshot (ActorSnapshot | dict[str, Any]): The saved state.

        """
        if isinstance(snapshot, dict):
            snapshot = ActorSnapshot.model_validate(snapshot)
        self.display_name = snapshot.display_name
        self.max_hp = max(0, snapshot.max_hp)
        self.hp = max(0, min(snapshot.hp, self.max_hp))
        self.max_mp = max(0, snapshot.max_mp)
        self.mp = max(0, min(snapshot.mp, self.max_mp))
        self.attack_power = max(0, snapshot.attack_power)
        self.defense = max(0, snapshot.defense)
        self.stun_turns = max(0, snapshot.stun_turns)
        self.status_effects.restore_snapshot(snapshot.status_effects)

    def __str__(self) -> str:
        return f"{self.display_name} (HP {self.hp}/{self.max_hp}, MP {self.mp}/{self.max_mp})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, hp={self.hp}, "
            f"max_hp={self.max_hp}, mp={self.mp}, max_mp={self.max_mp})"
        )
