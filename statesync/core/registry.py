"""Provider type descriptors and property type registration."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Type


@dataclass(frozen=True)
class ProviderType:
    """
    Class-level configuration shared by every property of one backend.

    Args:
        name: Provider name (e.g., "netinfo")
        key_map: Property name -> backend attribute key; read-only once built
        required_tools: Executables the backend shells out to
    """

    name: str
    key_map: Mapping[str, str] = field(default_factory=dict)
    required_tools: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "key_map", MappingProxyType(dict(self.key_map)))
        object.__setattr__(self, "required_tools", tuple(self.required_tools))

    def key_for(self, property_name: str) -> Optional[str]:
        """Backend key for a property; defaults to the property's own name."""
        if property_name in self.key_map:
            return self.key_map[property_name]
        return property_name or None


class PropertyRegistry:
    """Registry of property classes by provider and property name."""

    def __init__(self):
        self._providers: Dict[str, ProviderType] = {}
        self._properties: Dict[Tuple[str, str], Type] = {}

    def register_provider(self, provider: ProviderType) -> ProviderType:
        if provider.name in self._providers:
            raise ValueError(f"Provider already registered: {provider.name}")
        self._providers[provider.name] = provider
        return provider

    def register(self, property_class: Type) -> Type:
        """Register a property class; usable as a class decorator."""
        provider = property_class.provider_type
        if provider.name not in self._providers:
            self.register_provider(provider)
        key = (provider.name, property_class.name)
        if key in self._properties:
            raise ValueError(f"Property already registered: {provider.name}/{property_class.name}")
        self._properties[key] = property_class
        return property_class

    def get(self, provider_name: str, property_name: str) -> Optional[Type]:
        return self._properties.get((provider_name, property_name))

    def list_for_provider(self, provider_name: str) -> List[Type]:
        return [cls for (p, _), cls in sorted(self._properties.items()) if p == provider_name]
