"""
Constants and enumerations for the simulator.

Defines the tunable numbers of the combat rules and the enumerations shared
by status effects, actors, actions and adversary decision policies.
"""

from enum import Enum

# Hit and critical defaults used when an action does not override them.
DEFAULT_HIT_RATE = 0.95
DEFAULT_CRITICAL_RATE = 0.05
CRITICAL_MULTIPLIER = 3.0
# Half-width of the damage variance band (+/- 20%).
DEFAULT_VARIANCE = 0.2

# Sentinel duration: the effect persists until explicitly removed.
PERMANENT_DURATION = -1

# Resource economy.
MP_REGEN_DIVISOR = 10
KNOCKOUT_RECOVERY_RATIO = 0.5
STAY_STILL_HEAL_RATIO = 0.05
STAY_STILL_MP_RATIO = 0.25

# Struggle (escape) chances.
STRUGGLE_BASE_RATE = 0.2
STRUGGLE_RATE_STEP = 0.2
STRUGGLE_RATE_CAP = 0.9

# Turns an adversary stays stunned after its victim breaks free.
RESTRAINT_BREAK_STUN_TURNS = 1


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()

    @property
    def color(self) -> str:
        return "dim white"

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies the enum color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class StatusEffectType(str, NiceEnum):
    """
    Built-in status effect kinds.

    Members compare equal to their string value, so content data may refer
    to them (or to its own additional kinds) with plain strings.
    """

    DEAD = "dead"
    DOOMED = "doomed"
    KNOCKED_OUT = "knocked-out"
    EXHAUSTED = "exhausted"
    RESTRAINED = "restrained"
    COCOON = "cocoon"
    EATEN = "eaten"
    DEFENDING = "defending"
    STUNNED = "stunned"
    FIRE = "fire"
    CHARM = "charm"
    SLOW = "slow"
    POISON = "poison"
    INVINCIBLE = "invincible"
    ENERGIZED = "energized"
    SLIMED = "slimed"
    SHRUNK = "shrunk"
    PARALYSIS = "paralysis"
    WEAKNESS = "weakness"
    CONFUSION = "confusion"
    SLEEP = "sleep"
    MAGIC_SEAL = "magic-seal"

    def __str__(self) -> str:
        return self.value

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this effect kind."""
        return {
            StatusEffectType.DEAD: "💀",
            StatusEffectType.DOOMED: "⚰️",
            StatusEffectType.KNOCKED_OUT: "💫",
            StatusEffectType.EXHAUSTED: "😮‍💨",
            StatusEffectType.RESTRAINED: "⛓️",
            StatusEffectType.EATEN: "👄",
            StatusEffectType.DEFENDING: "🛡️",
            StatusEffectType.STUNNED: "⚡",
            StatusEffectType.FIRE: "🔥",
            StatusEffectType.POISON: "☠️",
            StatusEffectType.INVINCIBLE: "✨",
            StatusEffectType.SLEEP: "💤",
        }.get(self, "❔")


class EffectCategory(NiceEnum):
    """Defines whether an effect helps, hinders, or is neutral to its owner."""

    BUFF = "buff"
    DEBUFF = "debuff"
    NEUTRAL = "neutral"

    @property
    def color(self) -> str:
        """Returns the color string associated with this category."""
        return {
            EffectCategory.BUFF: "bold green",
            EffectCategory.DEBUFF: "bold red",
        }.get(self, "dim white")


class TargetStatus(NiceEnum):
    """The resource pool a damage parameter writes into."""

    HP = "hp"
    MP = "mp"
    MAX_HP = "max-hp"
    MAX_MP = "max-mp"


class ValueType(NiceEnum):
    """Polarity of a damage parameter."""

    DAMAGE = "damage"
    HEAL = "heal"


class AccuracyType(NiceEnum):
    """How an action resolves its hit check."""

    FIXED = "fixed"
    EVADE = "evade"


class ActionTarget(NiceEnum):
    """Which actor an action is aimed at."""

    ENEMY = "enemy"
    SELF = "self"


class ActionType(NiceEnum):
    """Kind tag of an action description."""

    ATTACK = "attack"
    STATUS_ATTACK = "status-attack"
    RESTRAINT_ATTACK = "restraint-attack"
    EAT_ATTACK = "eat-attack"
    DEVOUR_ATTACK = "devour-attack"
    FINISHING_MOVE = "finishing-move"
    TRANSFORM = "transform"
    SKIP = "skip"

    @property
    def rolls_hit(self) -> bool:
        """Whether actions of this kind go through the hit check."""
        return self not in (
            ActionType.FINISHING_MOVE,
            ActionType.TRANSFORM,
            ActionType.SKIP,
        )

    @property
    def color(self) -> str:
        """Returns the color string associated with this action kind."""
        return {
            ActionType.ATTACK: "bold red",
            ActionType.STATUS_ATTACK: "bold magenta",
            ActionType.RESTRAINT_ATTACK: "bold yellow",
            ActionType.EAT_ATTACK: "bold yellow",
            ActionType.DEVOUR_ATTACK: "bold yellow",
            ActionType.FINISHING_MOVE: "bold white",
            ActionType.TRANSFORM: "bold cyan",
        }.get(self, "dim white")


class PlayerState(NiceEnum):
    """Player state derived from the active status effects."""

    NORMAL = "normal"
    KNOCKED_OUT = "knocked-out"
    RESTRAINED = "restrained"
    EATEN = "eaten"
    DOOMED = "doomed"
    DEAD = "dead"


class SelectionOutcome(NiceEnum):
    """How an adversary came up with the action it returned."""

    SELECTED = "selected"
    FALLBACK = "fallback"
    CANNOT_ACT = "cannot-act"


class ActionOutcome(NiceEnum):
    """Top-level outcome of an action execution."""

    PERFORMED = "performed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
