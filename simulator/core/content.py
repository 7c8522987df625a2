"""
Content loading for the combat core.

Status effect tables and adversary repertoires are authored as JSON lists and
turned into validated models here. A malformed entry is skipped with a
warning so one typo does not take the whole table down; an unreadable file
raises.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_warning

from actions.action_factory import load_repertoire
from actions.base_action import ActionDescription
from core.error_handling import ContentError
from core.logging import log_info
from effects.catalogue import potency_damage_tick
from effects.effect_registry import default_registry
from effects.status_effect import StatusEffectDefinition


def _load_json_file(filepath: Path, description: str) -> list[dict[str, Any]]:
    """Helper to load and validate a JSON list file."""
    try:
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ContentError(
            f"Could not load {description} from {filepath}: {e}",
            {"path": str(filepath)},
        ) from e
    log_info(f"Loaded {len(data)} {description} from {filepath.name}")
    return data


def _as_entries(source: "str | Path | list[dict[str, Any]]", description: str) -> list[dict[str, Any]]:
    if isinstance(source, (str, Path)):
        return _load_json_file(Path(source), description)
    return list(source)


# ==============================================================================
# STATUS EFFECTS
# ==============================================================================


def _heal_tick(amount: int) -> Callable[[Any, Any], None]:
    def tick(actor: Any, instance: Any) -> None:
        actor.heal(amount)

    return tick


def _max_hp_ratio_tick(ratio: float) -> Callable[[Any, Any], None]:
    def tick(actor: Any, instance: Any) -> None:
        reduction = int(actor.max_hp * ratio)
        if reduction > 0:
            actor.lose_max_hp(reduction)

    return tick


def _build_tick(entry: dict[str, Any]) -> Callable[[Any, Any], Any] | None:
    """Turns the tick shorthands of an entry into an on_tick hook."""
    shorthands = [key for key in ("tick_damage", "tick_heal", "tick_max_hp_ratio") if key in entry]
    if len(shorthands) > 1:
        raise ValueError(f"Only one tick shorthand allowed, got {', '.join(shorthands)}")
    if "tick_damage" in entry:
        # Damage ticks scale with the instance potency so stacks and overrides work.
        damage = int(entry.pop("tick_damage"))
        entry.setdefault("potency", damage)
        return potency_damage_tick
    if "tick_heal" in entry:
        return _heal_tick(int(entry.pop("tick_heal")))
    if "tick_max_hp_ratio" in entry:
        return _max_hp_ratio_tick(float(entry.pop("tick_max_hp_ratio")))
    return None


def parse_effect_definition(data: dict[str, Any]) -> StatusEffectDefinition:
    """
    Builds a status effect definition from its JSON form.

    Args:
        data (dict[str, Any]): The raw entry.

    Returns:
        StatusEffectDefinition: The validated definition.

    Raises:
        ValueError: If the entry is malformed.

    """
    entry = dict(data)
    on_tick = _build_tick(entry)
    if on_tick is not None:
        entry["on_tick"] = on_tick
    return StatusEffectDefinition.model_validate(entry)


def load_effect_definitions(
    source: "str | Path | list[dict[str, Any]]",
    registry: Any = None,
) -> list[str]:
    """
    Registers the status effects described by a JSON file or a list of
    dictionaries.

    Args:
        source (str | Path | list[dict[str, Any]]):
            The file to read, or the already parsed entries.
        registry (StatusEffectRegistry | None):
            Where to register, the default registry if None.

    Returns:
        list[str]:
            The kinds that were registered.

    """
    registry = registry if registry is not None else default_registry()
    registered: list[str] = []
    for index, data in enumerate(_as_entries(source, "status effects")):
        if not isinstance(data, dict):
            log_warning(
                f"Skipping status effect #{index}: expected an object",
                {"index": index, "type": type(data).__name__},
            )
            continue
        try:
            definition = parse_effect_definition(data)
        except (TypeError, ValueError) as e:
            log_warning(
                f"Skipping invalid status effect '{data.get('kind', '<unnamed>')}': {e}",
                {"index": index, "kind": data.get("kind")},
            )
            continue
        registry.register(definition)
        registered.append(definition.kind)
    return registered


# ==============================================================================
# REPERTOIRES
# ==============================================================================


def load_repertoire_file(path: "str | Path", strict: bool = False) -> list[ActionDescription]:
    """
    Loads an adversary repertoire from a JSON file.

    Args:
        path (str | Path): The file to read.
        strict (bool): Raise on the first invalid action instead of skipping it.

    Returns:
        list[ActionDescription]: The valid actions, in file order.

    """
    return load_repertoire(_load_json_file(Path(path), "actions"), strict=strict)
