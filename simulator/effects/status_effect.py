"""
Status effect module for the simulator.

Defines the immutable description of a status effect kind (its modifiers,
default duration, lifecycle hooks and message templates) and the mutable
instance attached to one actor.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.constants import PERMANENT_DURATION, EffectCategory, StatusEffectType


def effect_key(kind: "str | StatusEffectType") -> str:
    """
    Normalizes an effect kind to its registry key.

    Args:
        kind (str | StatusEffectType): A built-in kind or a content-defined name.

    Returns:
        str: The plain string key.

    """
    if isinstance(kind, Enum):
        return str(kind.value)
    return str(kind)


# Hook signatures: (owner actor, instance) -> None, or a log line for ticks.
EffectHook = Callable[[Any, Any], None]
TickHook = Callable[[Any, Any], Any]


class EffectModifiers(BaseModel):
    """
    Stat modifiers contributed by one active effect.

    Multiplicative factors default to 1.0 and compound across every active
    effect. Capability flags default to True and are AND-ed across effects.
    """

    model_config = ConfigDict(frozen=True)

    attack_power: float = Field(1.0, description="Factor on attack power.")
    damage_received: float = Field(1.0, description="Factor on incoming damage.")
    struggle_rate: float = Field(1.0, description="Factor on escape chance.")
    accuracy: float = Field(1.0, description="Factor on hit chance.")
    can_act: bool = Field(True, description="False forbids taking any action.")
    can_use_skills: bool = Field(True, description="False forbids skills.")


class EffectMessages(BaseModel):
    """
    Optional message templates for presentation.

    Templates use ``{name}`` for the owner's display name and ``{damage}``
    for the amount a tick dealt.
    """

    model_config = ConfigDict(frozen=True)

    on_apply: str | None = None
    on_tick: str | None = None
    on_remove: str | None = None

    def render(self, template: str | None, name: str, damage: int = 0) -> str | None:
        if not template:
            return None
        return template.replace("{name}", name).replace("{damage}", str(damage))


class StatusEffectDefinition(BaseModel):
    """
    Immutable definition of a status effect kind.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: str = Field(
        description="The key this definition is registered under.",
    )
    name: str = Field(
        description="Display name of the effect.",
    )
    description: str = Field(
        "",
        description="A brief description of the effect.",
    )
    duration: int = Field(
        PERMANENT_DURATION,
        description="Default duration in turns, -1 to persist until removed.",
    )
    category: EffectCategory = Field(
        EffectCategory.NEUTRAL,
        description="Whether the effect is a buff, a debuff or neutral.",
    )
    modifiers: EffectModifiers = Field(
        default_factory=EffectModifiers,
        description="Stat modifiers contributed while active.",
    )
    stackable: bool = Field(
        False,
        description="Stackable kinds may have several simultaneous instances.",
    )
    potency: int | None = Field(
        None,
        description="Default strength of the effect, e.g. damage per tick.",
    )
    on_apply: EffectHook | None = Field(
        None,
        description="Called when an instance is added or refreshed.",
    )
    on_tick: TickHook | None = Field(
        None,
        description="Called once per round while active, may return a log line.",
    )
    on_remove: EffectHook | None = Field(
        None,
        description="Called when an instance is removed.",
    )
    messages: EffectMessages = Field(
        default_factory=EffectMessages,
        description="Optional presentation templates.",
    )

    def model_post_init(self, _: Any) -> None:
        if not self.kind:
            raise ValueError("Effect kind must be a non-empty string.")
        if self.duration < PERMANENT_DURATION:
            raise ValueError(
                f"Duration of '{self.kind}' must be -1 or non-negative, got {self.duration}."
            )

    @property
    def is_debuff(self) -> bool:
        return self.category == EffectCategory.DEBUFF

    @property
    def is_buff(self) -> bool:
        return self.category == EffectCategory.BUFF

    @property
    def is_permanent(self) -> bool:
        """Whether the effect persists until explicitly removed."""
        return self.duration == PERMANENT_DURATION


class StatusEffectInstance(BaseModel):
    """
    An active status effect attached to exactly one actor.
    """

    kind: str = Field(
        description="The kind of the effect.",
    )
    remaining_duration: int = Field(
        description="Turns left, -1 for effects that never expire by ticking.",
    )
    potency: int | None = Field(
        None,
        description="Strength of this instance, overriding the definition's.",
    )

    @property
    def is_permanent(self) -> bool:
        return self.remaining_duration == PERMANENT_DURATION

    def tick(self) -> bool:
        """
        Decrements the remaining duration.

        Returns:
            bool: True if the instance has expired.

        """
        if self.is_permanent:
            return False
        self.remaining_duration = max(0, self.remaining_duration - 1)
        return self.remaining_duration == 0
