"""Registry module — listing, metadata fetch, and repository URL helpers."""

from dependents_engine.registry.errors import AuthenticationFailed, PackageNotFound, RegistryError
from dependents_engine.registry.gateway import BowerRegistry, RegistryGateway, create_client
from dependents_engine.registry.urls import extract_owner, is_canonical_url, to_https_url

__all__ = [
    "AuthenticationFailed",
    "PackageNotFound",
    "RegistryError",
    "BowerRegistry",
    "RegistryGateway",
    "create_client",
    "extract_owner",
    "is_canonical_url",
    "to_https_url",
]
