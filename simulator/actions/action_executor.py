"""
Action executor module for the simulator.

Resolves an action description against a user and a target and reports
what happened. There is one code path for every action: per repetition a hit
check, then damage parameters, then the side effects of the action kind,
then extra status effects, and finally the action's custom function.
"""

from typing import Any

from combat.combat_math import apply_variance, effective_hit_rate, roll_critical, roll_hit
from core.constants import (
    CRITICAL_MULTIPLIER,
    AccuracyType,
    ActionOutcome,
    ActionTarget,
    ActionType,
    StatusEffectType,
    TargetStatus,
    ValueType,
)
from core.logging import log_debug
from core.utils import get_random

from actions.action_result import ActionResult, SingleActionResult, ValueChange
from actions.base_action import (
    ActionDescription,
    ApplyStatusEffect,
    DamageParameter,
    RemoveStatusEffect,
)

_POOL_NAMES = {
    TargetStatus.HP: "HP",
    TargetStatus.MP: "MP",
    TargetStatus.MAX_HP: "max HP",
    TargetStatus.MAX_MP: "max MP",
}


class ActionExecutor:
    """
    Executes action descriptions.
    """

    def execute(
        self,
        action: ActionDescription,
        user: Any,
        target: Any,
        turn: int = 0,
    ) -> ActionResult:
        """
        Executes an action.

        Args:
            action (ActionDescription): The action to execute.
            user (Actor): The actor performing it.
            target (Actor): The opponent. Self-targeted actions apply to the user.
            turn (int): The current turn number, passed to the hooks.

        Returns:
            ActionResult: What happened, with log lines.

        """
        if action.on_pre_use is not None:
            replacement = action.on_pre_use(action, user, target, turn)
            if replacement is None:
                log_debug(f"{action.name} was called off by its pre-use hook")
                return ActionResult(
                    action_name=action.name,
                    kind=action.kind,
                    outcome=ActionOutcome.CANCELLED,
                )
            action = replacement

        recipient = user if action.target == ActionTarget.SELF else target
        result = ActionResult(action_name=action.name, kind=action.kind)
        result.messages.extend(action.format_messages(user, recipient))

        if action.mp_cost > 0:
            result.mp_paid = user.consume_mp(action.mp_cost)

        if action.kind == ActionType.SKIP:
            result.outcome = ActionOutcome.SKIPPED
        elif not action.kind.rolls_hit:
            result.results.append(self._resolve_landed(action, user, recipient, False, result.messages))
        else:
            for _ in range(action.repeat_count):
                result.results.append(self._execute_single(action, user, recipient, result.messages))

        if action.on_use is not None:
            result.messages.extend(action.on_use(user, target, turn) or [])

        log_debug(
            f"{user.display_name} used {action.name}",
            {
                "outcome": result.outcome.value,
                "hits": result.hits,
                "misses": result.misses,
                "criticals": result.criticals,
            },
        )
        return result

    # ===========================================================================
    # SINGLE REPETITION
    # ===========================================================================

    def _execute_single(
        self,
        action: ActionDescription,
        user: Any,
        target: Any,
        messages: list[str],
    ) -> SingleActionResult:
        if target is not user and target.status_effects.has_effect(StatusEffectType.INVINCIBLE):
            messages.append(f"{target.display_name} evades {action.name}!")
            return SingleActionResult(success=False, evaded=True)

        if not self.check_accuracy(action, user, target):
            messages.append(f"{user.display_name}'s {action.name} missed!")
            return SingleActionResult(success=False)

        is_critical = roll_critical(action.critical_rate)
        if is_critical:
            messages.append("Critical hit!")
        return self._resolve_landed(action, user, target, is_critical, messages)

    def check_accuracy(self, action: ActionDescription, user: Any, target: Any) -> bool:
        """
        Resolves the hit check.

        Fixed accuracy draws against the action's accuracy. Evade accuracy
        never misses an incapacitated target and otherwise scales the
        accuracy by the user's status modifiers.

        Args:
            action (ActionDescription): The action being resolved.
            user (Actor): The actor performing it.
            target (Actor): The actor receiving it.

        Returns:
            bool: True if the action lands.

        """
        if action.accuracy_type == AccuracyType.EVADE:
            hit_rate = effective_hit_rate(
                action.accuracy,
                accuracy_modifier=user.status_effects.get_accuracy_modifier(),
                target_incapacitated=target.is_knocked_out(),
            )
            # Stat-based hit bonuses and target evasion would adjust hit_rate here.
            return roll_hit(hit_rate)
        return roll_hit(action.accuracy)

    def _resolve_landed(
        self,
        action: ActionDescription,
        user: Any,
        target: Any,
        is_critical: bool,
        messages: list[str],
    ) -> SingleActionResult:
        single = SingleActionResult(success=True, critical_hit=is_critical)

        multiplier = 1.0
        if is_critical:
            multiplier = (
                action.critical_multiplier(user, target)
                if action.critical_multiplier is not None
                else CRITICAL_MULTIPLIER
            )

        for param in action.damage_parameters:
            self._apply_damage_parameter(param, user, target, multiplier, single, messages)

        self._apply_kind_effects(action, target, single, messages)

        for effect in action.extra_effects:
            if isinstance(effect, ApplyStatusEffect):
                self._apply_status(effect, target, single, messages)
            elif isinstance(effect, RemoveStatusEffect):
                self._remove_status(effect, target, single, messages)

        if action.custom_function is not None:
            single = action.custom_function(user, target, single) or single
        return single

    # ===========================================================================
    # DAMAGE PARAMETERS
    # ===========================================================================

    def _apply_damage_parameter(
        self,
        param: DamageParameter,
        user: Any,
        target: Any,
        critical_multiplier: float,
        single: SingleActionResult,
        messages: list[str],
    ) -> None:
        base = param.base_value(user, target, critical_multiplier)
        if base <= 0:
            single.target_value_changes.append(ValueChange(target_status=param.target_status, change=0))
            return
        magnitude = apply_variance(base, param.fluctuation)

        if param.value_type == ValueType.DAMAGE:
            applied = self._reduce_pool(target, param.target_status, magnitude)
            single.target_value_changes.append(
                ValueChange(target_status=param.target_status, change=-applied)
            )
            messages.append(self._damage_message(target, param.target_status, applied))
            if param.absorb_ratio > 0 and applied > 0:
                gained = self._absorb(user, param.target_status, applied, param.absorb_ratio)
                if gained > 0:
                    single.user_value_changes.append(
                        ValueChange(target_status=param.target_status, change=gained)
                    )
                    messages.append(
                        f"{user.display_name} absorbs {gained} {_POOL_NAMES[param.target_status]}!"
                    )
        else:
            applied = self._raise_pool(target, param.target_status, magnitude)
            single.target_value_changes.append(
                ValueChange(target_status=param.target_status, change=applied)
            )
            messages.append(
                f"{target.display_name} recovers {applied} {_POOL_NAMES[param.target_status]}!"
            )

    def _reduce_pool(self, target: Any, status: TargetStatus, amount: int) -> int:
        if status == TargetStatus.HP:
            return target.take_damage(amount)
        if status == TargetStatus.MP:
            return target.lose_mp(amount)
        if status == TargetStatus.MAX_HP:
            return target.lose_max_hp(amount)
        return target.lose_max_mp(amount)

    def _raise_pool(self, target: Any, status: TargetStatus, amount: int) -> int:
        if status == TargetStatus.HP:
            return target.heal(amount)
        if status == TargetStatus.MP:
            return target.recover_mp(amount)
        if status == TargetStatus.MAX_HP:
            return target.gain_max_hp(amount)
        return target.gain_max_mp(amount)

    def _absorb(self, user: Any, status: TargetStatus, applied: int, ratio: float) -> int:
        if status == TargetStatus.HP:
            return user.heal_from_damage(applied, ratio)
        # Half-up rounding.
        return self._raise_pool(user, status, int(applied * ratio + 0.5))

    def _damage_message(self, target: Any, status: TargetStatus, applied: int) -> str:
        if status == TargetStatus.HP:
            return f"{target.display_name} takes {applied} damage!"
        return f"{target.display_name} loses {applied} {_POOL_NAMES[status]}!"

    # ===========================================================================
    # STATUS EFFECTS
    # ===========================================================================

    def _apply_kind_effects(
        self,
        action: ActionDescription,
        target: Any,
        single: SingleActionResult,
        messages: list[str],
    ) -> None:
        if action.kind == ActionType.RESTRAINT_ATTACK:
            self._add(target, StatusEffectType.RESTRAINED, single, messages)
        elif action.kind == ActionType.EAT_ATTACK:
            self._drop(target, StatusEffectType.RESTRAINED, single, messages)
            self._drop(target, StatusEffectType.COCOON, single, messages)
            self._add(target, StatusEffectType.EATEN, single, messages)
        elif action.kind == ActionType.FINISHING_MOVE:
            self._drop(target, StatusEffectType.DOOMED, single, messages)
            self._add(target, StatusEffectType.DEAD, single, messages)

    def _apply_status(
        self,
        effect: ApplyStatusEffect,
        target: Any,
        single: SingleActionResult,
        messages: list[str],
    ) -> None:
        if get_random().random() < effect.probability:
            self._add(target, effect.status, single, messages, effect.duration, effect.value)

    def _remove_status(
        self,
        effect: RemoveStatusEffect,
        target: Any,
        single: SingleActionResult,
        messages: list[str],
    ) -> None:
        if get_random().random() < effect.probability:
            self._drop(target, effect.status, single, messages)

    def _add(
        self,
        target: Any,
        kind: str,
        single: SingleActionResult,
        messages: list[str],
        duration: int | None = None,
        potency: int | None = None,
    ) -> None:
        instance = target.status_effects.add_effect(kind, duration=duration, potency=potency)
        single.target_added_states.append(instance.kind)
        definition = target.status_effects.definition(instance.kind)
        rendered = definition.messages.render(definition.messages.on_apply, target.display_name)
        messages.append(rendered or f"{target.display_name} is now {definition.name.lower()}!")

    def _drop(
        self,
        target: Any,
        kind: str,
        single: SingleActionResult,
        messages: list[str],
    ) -> None:
        if not target.status_effects.has_effect(kind):
            return
        definition = target.status_effects.definition(kind)
        target.status_effects.remove_effect(kind)
        single.target_removed_states.append(definition.kind)
        rendered = definition.messages.render(definition.messages.on_remove, target.display_name)
        messages.append(rendered or f"{target.display_name} is no longer {definition.name.lower()}.")
