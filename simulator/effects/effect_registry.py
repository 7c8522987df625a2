"""
Effect registry module for the simulator.

Maps effect kinds to their definitions. Every status effect manager looks
its definitions up here, so content can introduce new kinds without touching
the engine.
"""

from core.error_handling import ContentError
from core.logging import log_debug
from core.utils import Singleton

from effects.catalogue import builtin_definitions
from effects.status_effect import StatusEffectDefinition, effect_key


class StatusEffectRegistry:
    """
    A catalogue of status effect definitions keyed by kind.
    """

    def __init__(self, definitions: list[StatusEffectDefinition] | None = None) -> None:
        self._definitions: dict[str, StatusEffectDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    def register(self, definition: StatusEffectDefinition, replace: bool = True) -> None:
        """
        Registers a definition under its kind.

        Args:
            definition (StatusEffectDefinition): The definition to register.
            replace (bool): Whether an existing definition may be replaced.

        Raises:
            ContentError: If the kind is taken and replace is False.

        """
        key = effect_key(definition.kind)
        if not replace and key in self._definitions:
            raise ContentError(f"Effect kind '{key}' is already registered.")
        self._definitions[key] = definition
        log_debug("Registered status effect", {"kind": key})

    def unregister(self, kind: str) -> bool:
        return self._definitions.pop(effect_key(kind), None) is not None

    def has(self, kind: str) -> bool:
        return effect_key(kind) in self._definitions

    def get(self, kind: str) -> StatusEffectDefinition:
        """
        Looks a definition up.

        Args:
            kind (str): The effect kind.

        Returns:
            StatusEffectDefinition: The definition.

        Raises:
            ContentError: If the kind is unknown.

        """
        key = effect_key(kind)
        definition = self._definitions.get(key)
        if definition is None:
            raise ContentError(f"Unknown status effect kind '{key}'.", {"kind": key})
        return definition

    def kinds(self) -> list[str]:
        return list(self._definitions)

    def __contains__(self, kind: object) -> bool:
        return isinstance(kind, str) and self.has(kind)

    def __len__(self) -> int:
        return len(self._definitions)


class DefaultEffectRegistry(StatusEffectRegistry, metaclass=Singleton):
    """The process-wide registry, pre-populated with the built-in catalogue."""

    def __init__(self) -> None:
        super().__init__(builtin_definitions())


def default_registry() -> StatusEffectRegistry:
    """Returns the shared registry holding the built-in effects."""
    return DefaultEffectRegistry()
