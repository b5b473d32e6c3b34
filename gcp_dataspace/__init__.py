"""Google Cloud vault, storage, IAM and BigQuery extensions for a dataspace connector."""

from .config import AppConfig, GcpConfiguration, VaultConfig
from .services import build_provisioner_registry, build_vault
from .vault import GcpSecretManagerVault, normalize_key

__all__ = [
    "AppConfig",
    "GcpConfiguration",
    "GcpSecretManagerVault",
    "VaultConfig",
    "build_provisioner_registry",
    "build_vault",
    "normalize_key",
]
