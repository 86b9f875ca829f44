"""Registry of source control providers keyed by backend name."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from .errors import UnknownProviderError
from .git_provider import GitSourceControlProvider
from .process import CommandRunner
from .provider import SourceControlProvider
from .reports import Reports

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Maps backend names to provider classes and their default settings."""

    def __init__(self) -> None:
        self._providers: Dict[str, Tuple[Type[SourceControlProvider], Dict[str, Any]]] = {}
        self._register_default_providers()

    def _register_default_providers(self) -> None:
        self.register("git", GitSourceControlProvider)

    def register(
        self,
        name: str,
        provider_class: Type[SourceControlProvider],
        **default_kwargs: Any
    ) -> None:
        """Register a provider with default configuration.

        Args:
            name: Backend name for resolution (case-insensitive)
            provider_class: SourceControlProvider subclass
            **default_kwargs: Default keyword arguments for provider creation
        """
        if not name or not name.strip():
            raise ValueError("Provider name must be non-empty")
        if not isinstance(provider_class, type) or not issubclass(provider_class, SourceControlProvider):
            raise ValueError("Provider class must inherit from SourceControlProvider")

        self._providers[name.lower().strip()] = (provider_class, default_kwargs)
        logger.debug(f"Registered source control provider: {name}")

    def is_registered(self, name: str) -> bool:
        return name.lower().strip() in self._providers

    def list_providers(self) -> List[str]:
        """List all registered provider names."""
        return list(self._providers.keys())

    def create(
        self,
        name: str,
        reports: Reports,
        runner: Optional[CommandRunner] = None,
        **kwargs: Any
    ) -> SourceControlProvider:
        """Create a provider instance.

        Args:
            name: Registered backend name
            reports: Report sink handed to the provider
            runner: Optional command runner (provider default if None)
            **kwargs: Overrides for the registered default kwargs

        Returns:
            Configured SourceControlProvider instance

        Raises:
            UnknownProviderError: If no provider is registered under ``name``
        """
        key = name.lower().strip()
        if key not in self._providers:
            raise UnknownProviderError(name, self.list_providers())

        provider_class, default_kwargs = self._providers[key]
        merged_kwargs = {**default_kwargs, **kwargs}
        return provider_class(reports, runner, **merged_kwargs)


_default_registry = ProviderRegistry()


def get_default_registry() -> ProviderRegistry:
    """Get the default provider registry instance."""
    return _default_registry


def resolve_provider(
    name: str,
    reports: Reports,
    runner: Optional[CommandRunner] = None,
    registry: Optional[ProviderRegistry] = None,
    **kwargs: Any
) -> SourceControlProvider:
    """Resolve a provider by backend name.

    Args:
        name: Backend name, e.g. "git"
        reports: Report sink for progress and errors
        runner: Optional command runner
        registry: Optional registry instance (uses default if None)
        **kwargs: Provider-specific arguments

    Returns:
        Configured SourceControlProvider instance
    """
    if registry is None:
        registry = _default_registry
    return registry.create(name, reports, runner, **kwargs)
