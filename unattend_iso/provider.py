"""Provider registration for unattend_iso.

The provider names the resource types it offers and hands shared
configuration to each of them during the configure step.
"""

from collections.abc import Callable
from dataclasses import dataclass

from unattend_iso import __version__
from unattend_iso.config import Settings, get_settings
from unattend_iso.resources.controller import Resource, UnattendedISOResource

PROVIDER_TYPE_NAME = "unattend"


@dataclass
class ProviderData:
    """Data passed from the provider to its resources."""

    settings: Settings


class UnattendISOProvider:
    """Provider offering the unattend ISO file resource.

    Attributes:
        version: Provider version; "dev" for local builds, "test" in tests.
    """

    def __init__(self, version: str = __version__) -> None:
        self.version = version

    def metadata(self) -> tuple[str, str]:
        """Return the (type name, version) pair."""
        return PROVIDER_TYPE_NAME, self.version

    def configure(self, settings: Settings | None = None) -> ProviderData:
        """Build the data handed to resources."""
        return ProviderData(settings=settings or get_settings())

    def resources(self) -> list[Callable[[], Resource]]:
        """Return factories for the resource types offered."""
        return [UnattendedISOResource]

    def resource_types(self) -> dict[str, Callable[[], Resource]]:
        """Return resource factories keyed by their type name."""
        return {
            factory().metadata(PROVIDER_TYPE_NAME): factory
            for factory in self.resources()
        }

    def new_resource(
        self, type_name: str, provider_data: ProviderData | None = None
    ) -> Resource:
        """Instantiate and configure a resource by type name.

        Raises:
            KeyError: If the provider offers no such resource type.
        """
        factory = self.resource_types()[type_name]
        resource = factory()
        resource.configure(provider_data)
        return resource


def new(version: str = __version__) -> Callable[[], UnattendISOProvider]:
    """Return a factory for providers stamped with the given version."""

    def factory() -> UnattendISOProvider:
        return UnattendISOProvider(version=version)

    return factory


__all__ = [
    "PROVIDER_TYPE_NAME",
    "ProviderData",
    "UnattendISOProvider",
    "new",
]
