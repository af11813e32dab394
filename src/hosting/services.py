"""Minimal service container used by generated Lambda entry points.

Registrations are explicit: nothing is discovered, and a provider only knows
the descriptors it was built from.
"""

import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ServiceLifetime(str, Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class ServiceDescriptor:
    service_type: type
    lifetime: ServiceLifetime
    implementation_type: type | None = None
    factory: Callable[["ServiceProvider"], Any] | None = None
    instance: Any = None


class ServiceCollection:
    def __init__(self):
        self._descriptors: list[ServiceDescriptor] = []

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self):
        return iter(self._descriptors)

    def add_singleton(self, service_type: type, implementation: Any = None) -> "ServiceCollection":
        """Register ``service_type`` once per provider.

        ``implementation`` may be a type, a function or method taking the provider, an
        instance (callable objects included), or omitted to construct
        ``service_type`` itself.
        """
        self._descriptors.append(_describe(service_type, ServiceLifetime.SINGLETON, implementation))
        return self

    def add_transient(self, service_type: type, implementation: Any = None) -> "ServiceCollection":
        if implementation is not None and not (
            isinstance(implementation, type) or _is_factory(implementation)
        ):
            raise ValueError("Transient services need a type or factory, not an instance")
        self._descriptors.append(_describe(service_type, ServiceLifetime.TRANSIENT, implementation))
        return self

    def build_provider(self) -> "ServiceProvider":
        return ServiceProvider(list(self._descriptors))


def _is_factory(implementation: Any) -> bool:
    # Callable instances (objects with __call__) are registered as instances
    return inspect.isfunction(implementation) or inspect.ismethod(implementation)


def _describe(service_type: type, lifetime: ServiceLifetime, implementation: Any) -> ServiceDescriptor:
    if implementation is None:
        return ServiceDescriptor(service_type, lifetime, implementation_type=service_type)
    if isinstance(implementation, type):
        return ServiceDescriptor(service_type, lifetime, implementation_type=implementation)
    if _is_factory(implementation):
        return ServiceDescriptor(service_type, lifetime, factory=implementation)
    return ServiceDescriptor(service_type, lifetime, instance=implementation)


class ServiceProvider:
    def __init__(self, descriptors: list[ServiceDescriptor]):
        # Last registration for a type wins, as with repeated add_* calls
        self._by_type: dict[type, ServiceDescriptor] = {d.service_type: d for d in descriptors}
        self._descriptors = tuple(descriptors)
        self._singletons: dict[type, Any] = {}

    @property
    def descriptors(self) -> tuple[ServiceDescriptor, ...]:
        return self._descriptors

    def get_service(self, service_type: type) -> Any:
        descriptor = self._by_type.get(service_type)
        if descriptor is None:
            return None

        if descriptor.lifetime is ServiceLifetime.SINGLETON:
            if service_type not in self._singletons:
                self._singletons[service_type] = self._create(descriptor)
            return self._singletons[service_type]
        return self._create(descriptor)

    def get_required_service(self, service_type: type) -> Any:
        service = self.get_service(service_type)
        if service is None:
            raise LookupError(f"No service registered for type {service_type.__name__}")
        return service

    def _create(self, descriptor: ServiceDescriptor) -> Any:
        if descriptor.instance is not None:
            return descriptor.instance
        if descriptor.factory is not None:
            return descriptor.factory(self)
        return self._construct(descriptor.implementation_type)

    def _construct(self, cls: type) -> Any:
        """Instantiate ``cls``, filling annotated __init__ parameters from the provider."""
        init = cls.__init__
        if init is object.__init__:
            return cls()

        hints = typing.get_type_hints(init)
        kwargs = {}
        for name, param in inspect.signature(init).parameters.items():
            if name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            dependency = hints.get(name)
            if dependency is not None and dependency in self._by_type:
                kwargs[name] = self.get_required_service(dependency)
            elif param.default is param.empty:
                raise LookupError(
                    f"Cannot resolve parameter '{name}' of {cls.__name__}: "
                    f"no service registered for {getattr(dependency, '__name__', dependency)}"
                )
        return cls(**kwargs)
