"""Client profiles: lineage descriptors and the process-wide baseline registry.

A ``Lineage`` is the capability record a client type provides: how to merge
configurations and interceptors and how to create a client of that lineage.
The baseline defaults and interceptors of each lineage live in the
``ProfileRegistry``, set up once by the composition root.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from threading import Lock
from typing import TYPE_CHECKING, Any

import structlog

from scrapekit.fetch.errors import UnknownProfileError
from scrapekit.fetch.merge import (
    ConfigInput,
    InterceptorsInput,
    merge_config,
    merge_interceptors,
)
from scrapekit.fetch.schemas import Interceptor


if TYPE_CHECKING:
    from scrapekit.fetch.client import HttpClient

logger = structlog.get_logger()


# Module-level singleton state
_registry_instance: "ProfileRegistry | None" = None
_registry_lock: Lock = Lock()


@dataclass(frozen=True)
class ClientProfile:
    """Baseline state shared by every client of one lineage.

    Attributes:
        name: Lineage name.
        defaults: Baseline request configuration.
        interceptors: Baseline interceptor bundle.
    """

    name: str
    defaults: Mapping[str, Any] = field(default_factory=dict)
    interceptors: Mapping[str, Sequence[Interceptor]] = field(
        default_factory=lambda: {"request": [], "response": []}
    )


@dataclass(frozen=True)
class Lineage:
    """Capability record describing a client lineage.

    Attributes:
        name: Profile name used in the registry.
        factory: Callable building a client of this lineage.
        defaults: Defaults this lineage adds on top of its parent.
        interceptors: Interceptors this lineage adds on top of its parent.
        parent: Lineage whose baseline this one extends.
    """

    name: str
    factory: Callable[..., "HttpClient"]
    defaults: Mapping[str, Any] = field(default_factory=dict)
    interceptors: Mapping[str, Sequence[Interceptor]] = field(default_factory=dict)
    parent: "Lineage | None" = None

    def merge_config(self, a: ConfigInput, b: ConfigInput) -> dict[str, Any]:
        """Merge two configurations the way this lineage does."""
        return merge_config(a, b)

    def merge_interceptors(
        self, a: InterceptorsInput, b: InterceptorsInput
    ) -> dict[str, list[Interceptor]]:
        """Merge two interceptor bundles the way this lineage does."""
        return merge_interceptors(a, b)

    def create(
        self,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
        **options: Any,
    ) -> "HttpClient":
        """Create a client of this lineage.

        Args:
            config: Instance defaults merged over the baseline.
            interceptors: Instance interceptors merged over the baseline.
            options: Extra constructor options (transport, cache, ...).

        Returns:
            New client.
        """
        return self.factory(config, interceptors, **options)

    def baseline(self) -> ClientProfile:
        """Get the registered baseline of this lineage."""
        return ProfileRegistry.get_instance().resolve(self)


class ProfileRegistry:
    """Thread-safe registry of client profiles.

    Holds one ``ClientProfile`` per lineage name. Use get_instance() for
    singleton access.
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        self._profiles: dict[str, ClientProfile] = {}
        self._lock = Lock()
        self._log = logger.bind(component="profiles")

    @classmethod
    def get_instance(cls) -> "ProfileRegistry":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared ProfileRegistry instance.
        """
        global _registry_instance  # noqa: PLW0603
        if _registry_instance is None:
            with _registry_lock:
                if _registry_instance is None:
                    _registry_instance = cls()
        return _registry_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _registry_instance  # noqa: PLW0603
        with _registry_lock:
            _registry_instance = None

    def register(self, lineage: Lineage) -> ClientProfile:
        """Register the baseline of a lineage.

        The baseline is the parent's baseline merged with the lineage's own
        defaults and interceptors. Registering an existing name replaces it.

        Args:
            lineage: The lineage to register.

        Returns:
            The registered profile.
        """
        parent = (
            self.resolve(lineage.parent) if lineage.parent else ClientProfile("")
        )
        profile = ClientProfile(
            name=lineage.name,
            defaults=merge_config(parent.defaults, lineage.defaults),
            interceptors=merge_interceptors(parent.interceptors, lineage.interceptors),
        )
        with self._lock:
            self._profiles[lineage.name] = profile
        self._log.debug(
            "profile_registered",
            name=lineage.name,
            parent=lineage.parent.name if lineage.parent else None,
        )
        return profile

    def resolve(self, lineage: Lineage) -> ClientProfile:
        """Get the profile of a lineage, registering it on first use.

        Args:
            lineage: The lineage to look up.

        Returns:
            The registered profile.
        """
        with self._lock:
            profile = self._profiles.get(lineage.name)
        if profile is None:
            return self.register(lineage)
        return profile

    def get(self, name: str) -> ClientProfile:
        """Get a registered profile by name.

        Args:
            name: Profile name.

        Returns:
            The profile.

        Raises:
            UnknownProfileError: If no profile has that name.
        """
        with self._lock:
            profile = self._profiles.get(name)
        if profile is None:
            raise UnknownProfileError(name)
        return profile

    def define_defaults(self, lineage: Lineage, config: ConfigInput) -> ClientProfile:
        """Merge configuration into a lineage's baseline defaults.

        Intended for one-time setup before clients are created.

        Args:
            lineage: Lineage to update.
            config: Configuration merged over the current baseline.

        Returns:
            The updated profile.
        """
        current = self.resolve(lineage)
        profile = ClientProfile(
            name=current.name,
            defaults=merge_config(current.defaults, config),
            interceptors=current.interceptors,
        )
        with self._lock:
            self._profiles[lineage.name] = profile
        self._log.debug("profile_defaults_defined", name=lineage.name)
        return profile

    def define_interceptors(
        self, lineage: Lineage, interceptors: InterceptorsInput
    ) -> ClientProfile:
        """Merge interceptors into a lineage's baseline bundle.

        Args:
            lineage: Lineage to update.
            interceptors: Bundle merged over the current baseline.

        Returns:
            The updated profile.
        """
        current = self.resolve(lineage)
        profile = ClientProfile(
            name=current.name,
            defaults=current.defaults,
            interceptors=merge_interceptors(current.interceptors, interceptors),
        )
        with self._lock:
            self._profiles[lineage.name] = profile
        self._log.debug("profile_interceptors_defined", name=lineage.name)
        return profile

    def list_profiles(self) -> list[str]:
        """Get the names of all registered profiles."""
        with self._lock:
            return sorted(self._profiles)

    def count(self) -> int:
        """Get the number of registered profiles."""
        with self._lock:
            return len(self._profiles)
