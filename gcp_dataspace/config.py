"""Configuration models and helpers for the Google Cloud extensions."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}|\$(\w+)")


@dataclass
class GcpConfiguration:
    """Project-wide Google Cloud settings."""

    project_id: str
    service_account_name: Optional[str] = None
    service_account_file: Optional[str] = None
    universe_domain: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.project_id:
            raise ValueError("GcpConfiguration requires project_id")


@dataclass
class VaultConfig:
    """Secret Manager vault settings."""

    project: str
    region: str
    service_account_file: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.project:
            raise ValueError("VaultConfig requires project")
        if not self.region:
            raise ValueError("VaultConfig requires region")


@dataclass
class ProvisionConfig:
    """Defaults applied by the provisioners."""

    provider_role: str = "roles/storage.objectCreator"


@dataclass
class AppConfig:
    """Top-level configuration for the extensions."""

    gcp: GcpConfiguration
    vault: Optional[VaultConfig] = None
    provision: ProvisionConfig = field(default_factory=ProvisionConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        if "gcp" not in data:
            raise ValueError("Configuration requires a 'gcp' section")
        gcp = GcpConfiguration(**data["gcp"])
        vault_data = data.get("vault")
        vault = VaultConfig(**vault_data) if vault_data else None
        provision = ProvisionConfig(**data.get("provision", {}))
        return cls(gcp=gcp, vault=vault, provision=provision)

    @classmethod
    def from_json(cls, path: Path) -> "AppConfig":
        data = json.loads(path.read_text())
        return cls.from_dict(expand_env_vars(data))


def expand_env_vars(data: Union[dict, list, str, Any]) -> Any:
    """Recursively expand ${VAR} and $VAR references in config values."""
    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    if isinstance(data, str):
        def replacer(match: re.Match) -> str:
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return _ENV_PATTERN.sub(replacer, data)
    return data


def load_env_file(env_path: Path) -> None:
    """Load KEY=VALUE lines into the environment without overriding existing values."""
    if not env_path.exists():
        logger.debug("Environment file not found: %s", env_path)
        return

    logger.info("Loading environment from: %s", env_path)
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                if key.strip() not in os.environ:
                    os.environ[key.strip()] = value.strip()
