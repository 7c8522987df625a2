"""
Status effect manager module for the simulator.

Holds the active status effect instances of one actor, folds their modifiers
together, and advances them once per round.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.constants import EffectCategory, StatusEffectType
from core.error_handling import ensure_duration
from core.logging import log_debug

from effects.effect_registry import StatusEffectRegistry, default_registry
from effects.status_effect import (
    StatusEffectDefinition,
    StatusEffectInstance,
    effect_key,
)


def _owner_name(owner: Any) -> str:
    return getattr(owner, "display_name", None) or getattr(owner, "name", "???")


class EffectManagerSnapshot(BaseModel):
    """Plain serializable state of a status effect manager."""

    effects: list[StatusEffectInstance] = Field(
        default_factory=list,
        description="The active instances, in application order.",
    )


class StatusEffectManager:
    """
    Manages the active status effects of one actor.
    """

    def __init__(self, owner: Any = None, registry: StatusEffectRegistry | None = None) -> None:
        self.owner: Any = owner
        self.registry: StatusEffectRegistry = registry or default_registry()
        self.active_effects: list[StatusEffectInstance] = []

    # === Effect Management ===

    def definition(self, kind: str) -> StatusEffectDefinition:
        """Returns the definition of a kind, raising ContentError if unknown."""
        return self.registry.get(kind)

    def add_effect(
        self,
        kind: str,
        duration: int | None = None,
        potency: int | None = None,
    ) -> StatusEffectInstance:
        """
        Adds an effect to the owner.

        Stackable kinds get a new instance. Other kinds refresh the duration
        (and potency, if given) of the instance already present.

        Args:
            kind (str): The effect kind.
            duration (int | None): Turns to last, None for the default,
                -1 to persist until removed.
            potency (int | None): Strength of the instance, None for the default.

        Returns:
            StatusEffectInstance: The new or refreshed instance.

        Raises:
            ContentError: If the kind is not registered.

        """
        definition = self.definition(kind)
        key = effect_key(kind)
        if duration is None:
            duration = definition.duration
        else:
            duration = ensure_duration(duration, "duration", {"kind": key})
        if potency is None:
            potency = definition.potency

        existing = self.get_effect(key)
        if existing is not None and not definition.stackable:
            existing.remaining_duration = duration
            if potency is not None:
                existing.potency = potency
            instance = existing
            log_debug(
                "Refreshed status effect",
                {"owner": _owner_name(self.owner), "kind": key, "duration": duration},
            )
        else:
            instance = StatusEffectInstance(
                kind=key, remaining_duration=duration, potency=potency
            )
            self.active_effects.append(instance)
            log_debug(
                "Added status effect",
                {"owner": _owner_name(self.owner), "kind": key, "duration": duration},
            )

        if definition.on_apply is not None:
            definition.on_apply(self.owner, instance)
        return instance

    def remove_effect(self, kind: str) -> bool:
        """
        Removes every instance of a kind, invoking its removal hook.

        Args:
            kind (str): The effect kind.

        Returns:
            bool: True if anything was removed.

        """
        key = effect_key(kind)
        removed = [instance for instance in self.active_effects if instance.kind == key]
        if not removed:
            return False
        self.active_effects = [
            instance for instance in self.active_effects if instance.kind != key
        ]
        for instance in removed:
            self._on_removed(instance)
        return True

    def remove_instance(self, instance: StatusEffectInstance) -> bool:
        """Removes a single instance, e.g. one stack of a stackable effect."""
        for index, active in enumerate(self.active_effects):
            if active is instance:
                del self.active_effects[index]
                self._on_removed(instance)
                return True
        return False

    def _on_removed(self, instance: StatusEffectInstance) -> None:
        log_debug(
            "Removed status effect",
            {"owner": _owner_name(self.owner), "kind": instance.kind},
        )
        definition = self.registry.get(instance.kind)
        if definition.on_remove is not None:
            definition.on_remove(self.owner, instance)

    def _is_active(self, instance: StatusEffectInstance) -> bool:
        return any(active is instance for active in self.active_effects)

    def clear_all_effects(self) -> None:
        """Drops every effect without running removal hooks."""
        self.active_effects.clear()

    # === Queries ===

    def has_effect(self, kind: str) -> bool:
        key = effect_key(kind)
        return any(instance.kind == key for instance in self.active_effects)

    def get_effect(self, kind: str) -> StatusEffectInstance | None:
        """Returns the first instance of a kind, or None."""
        key = effect_key(kind)
        for instance in self.active_effects:
            if instance.kind == key:
                return instance
        return None

    def get_effects(self, kind: str | None = None) -> list[StatusEffectInstance]:
        """Returns every instance, or every instance of one kind."""
        if kind is None:
            return list(self.active_effects)
        key = effect_key(kind)
        return [instance for instance in self.active_effects if instance.kind == key]

    def active_kinds(self) -> set[str]:
        return {instance.kind for instance in self.active_effects}

    def get_buffs(self) -> list[StatusEffectInstance]:
        return self._by_category(EffectCategory.BUFF)

    def get_debuffs(self) -> list[StatusEffectInstance]:
        return self._by_category(EffectCategory.DEBUFF)

    def _by_category(self, category: EffectCategory) -> list[StatusEffectInstance]:
        return [
            instance
            for instance in self.active_effects
            if self.registry.get(instance.kind).category == category
        ]

    def get_debuff_level(self) -> int:
        """Returns the number of distinct debuff kinds currently active."""
        return len({instance.kind for instance in self.get_debuffs()})

    def remove_debuffs(self) -> list[str]:
        """
        Removes every debuff.

        Returns:
            list[str]: The kinds that were removed.

        """
        kinds = list(dict.fromkeys(instance.kind for instance in self.get_debuffs()))
        for kind in kinds:
            self.remove_effect(kind)
        return kinds

    # === Round Processing ===

    def apply_effects(self, actor: Any = None) -> list[str]:
        """
        Runs the tick hook of every active instance.

        Args:
            actor (Actor | None): The actor to tick, defaults to the owner.

        Returns:
            list[str]: Log lines produced by the ticks.

        """
        actor = actor if actor is not None else self.owner
        messages: list[str] = []
        for instance in list(self.active_effects):
            if not self._is_active(instance):
                continue
            definition = self.registry.get(instance.kind)
            if definition.on_tick is None:
                continue
            old_hp = getattr(actor, "hp", 0)
            line = definition.on_tick(actor, instance)
            damage = old_hp - getattr(actor, "hp", 0)
            if line:
                messages.append(line)
                continue
            rendered = definition.messages.render(
                definition.messages.on_tick, _owner_name(actor), damage
            )
            if rendered and damage > 0:
                messages.append(rendered)
            elif damage > 0:
                messages.append(
                    f"{_owner_name(actor)} takes {damage} damage from {definition.name}!"
                )
        return messages

    def decrease_durations(self, actor: Any = None) -> list[str]:
        """
        Decrements every timed instance and removes those that run out.

        Permanent instances (duration -1) are left alone.

        Args:
            actor (Actor | None): The actor being ticked, defaults to the owner.

        Returns:
            list[str]: One line per expired effect.

        """
        actor = actor if actor is not None else self.owner
        messages: list[str] = []
        expired = [instance for instance in list(self.active_effects) if instance.tick()]
        for instance in expired:
            if not self._is_active(instance):
                continue
            definition = self.registry.get(instance.kind)
            self.active_effects = [
                active for active in self.active_effects if active is not instance
            ]
            self._on_removed(instance)
            rendered = definition.messages.render(
                definition.messages.on_remove, _owner_name(actor)
            )
            messages.append(rendered or f"{definition.name} wore off.")
        return messages

    # === Modifiers ===

    def _fold_modifier(self, attribute: str) -> float:
        modifier = 1.0
        for instance in self.active_effects:
            modifier *= getattr(self.registry.get(instance.kind).modifiers, attribute)
        return modifier

    def get_attack_modifier(self) -> float:
        return self._fold_modifier("attack_power")

    def get_damage_modifier(self) -> float:
        return self._fold_modifier("damage_received")

    def get_struggle_modifier(self) -> float:
        return self._fold_modifier("struggle_rate")

    def get_accuracy_modifier(self) -> float:
        return self._fold_modifier("accuracy")

    def can_act(self) -> bool:
        """False as soon as any single active effect forbids acting."""
        return all(
            self.registry.get(instance.kind).modifiers.can_act
            for instance in self.active_effects
        )

    def can_use_skills(self) -> bool:
        return all(
            self.registry.get(instance.kind).modifiers.can_use_skills
            for instance in self.active_effects
        )

    # === Core State Predicates ===

    def is_dead(self) -> bool:
        return self.has_effect(StatusEffectType.DEAD)

    def is_doomed(self) -> bool:
        return self.has_effect(StatusEffectType.DOOMED)

    def is_knocked_out(self) -> bool:
        return self.has_effect(StatusEffectType.KNOCKED_OUT)

    def is_restrained(self) -> bool:
        return self.has_effect(StatusEffectType.RESTRAINED)

    def is_eaten(self) -> bool:
        return self.has_effect(StatusEffectType.EATEN)

    def is_cocoon(self) -> bool:
        return self.has_effect(StatusEffectType.COCOON)

    def is_exhausted(self) -> bool:
        return self.has_effect(StatusEffectType.EXHAUSTED)

    # === Serialization ===

    def to_snapshot(self) -> EffectManagerSnapshot:
        """Returns a detached copy of the active instances."""
        return EffectManagerSnapshot(
            effects=[instance.model_copy() for instance in self.active_effects]
        )

    def restore_snapshot(self, snapshot: EffectManagerSnapshot | dict[str, Any]) -> None:
        """
        Replaces the active instances with those of a snapshot.

        Hooks are not run: the snapshot already reflects their side effects.

        Raises:
            ContentError: If the snapshot mentions an unknown kind.

        """
        if isinstance(snapshot, dict):
            snapshot = EffectManagerSnapshot.model_validate(snapshot)
        for instance in snapshot.effects:
            self.registry.get(instance.kind)
        self.active_effects = [instance.model_copy() for instance in snapshot.effects]

    def __len__(self) -> int:
        return len(self.active_effects)

    def __repr__(self) -> str:
        kinds = ", ".join(
            f"{instance.kind}({instance.remaining_duration})"
            for instance in self.active_effects
        )
        return f"StatusEffectManager({_owner_name(self.owner)}: {kinds})"
