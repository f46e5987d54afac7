"""Minimal service registry.

Holds named service definitions (a factory plus keyword arguments) and builds
each one lazily, once. Arguments that are ``Reference`` objects are resolved
to other services at build time, which lets the wiring passes swap a
dependency after the definitions are registered but before anything is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class Reference:
    """Points at another service by name."""

    name: str


@dataclass
class ServiceDefinition:
    factory: Callable[..., Any]
    kwargs: dict[str, Any] = field(default_factory=dict)

    def set_argument(self, name: str, value: Any) -> None:
        self.kwargs[name] = value

    def argument(self, name: str) -> Any:
        return self.kwargs.get(name)


class ServiceNotFoundError(KeyError):
    pass


class ServiceRegistry:
    def __init__(self):
        self._definitions: dict[str, ServiceDefinition] = {}
        self._instances: dict[str, Any] = {}
        self._aliases: dict[str, str] = {}

    def register(self, name: str, factory: Callable[..., Any], **kwargs: Any) -> ServiceDefinition:
        definition = ServiceDefinition(factory, dict(kwargs))
        self._definitions[name] = definition
        self._aliases.pop(name, None)
        self._instances.pop(name, None)
        return definition

    def set(self, name: str, instance: Any) -> None:
        """Register an already-built service."""
        self._instances[name] = instance
        self._definitions.pop(name, None)
        self._aliases.pop(name, None)

    def set_alias(self, alias: str, target: str) -> None:
        """Make ``alias`` resolve to ``target``, replacing whatever ``alias`` was."""
        self._definitions.pop(alias, None)
        self._instances.pop(alias, None)
        self._aliases[alias] = target

    def _resolve_name(self, name: str) -> str:
        seen = set()
        while name in self._aliases:
            if name in seen:
                raise ServiceNotFoundError(f"Circular alias for service '{name}'")
            seen.add(name)
            name = self._aliases[name]
        return name

    def has(self, name: str) -> bool:
        name = self._resolve_name(name)
        return name in self._instances or name in self._definitions

    def has_definition(self, name: str) -> bool:
        return name in self._definitions

    def definition(self, name: str) -> ServiceDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise ServiceNotFoundError(f"Service '{name}' has no definition") from None

    def alias_target(self, name: str) -> str | None:
        return self._aliases.get(name)

    def get(self, name: str) -> Any:
        target = self._resolve_name(name)
        if target in self._instances:
            return self._instances[target]
        if target not in self._definitions:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")
        definition = self._definitions[target]
        kwargs = {key: self._resolve_argument(value) for key, value in definition.kwargs.items()}
        instance = definition.factory(**kwargs)
        self._instances[target] = instance
        return instance

    def _resolve_argument(self, value: Any) -> Any:
        if isinstance(value, Reference):
            return self.get(value.name)
        if isinstance(value, list):
            return [self._resolve_argument(item) for item in value]
        return value

    def built(self) -> dict[str, Any]:
        """Services that have been instantiated so far."""
        return dict(self._instances)
