"""Builders wiring configured Google Cloud services together."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .bigquery import BigQueryFactory
from .config import AppConfig, VaultConfig
from .iam import IamServiceImpl
from .interfaces import IamService, StorageService
from .provision import BigQueryProvisioner, GcsProvisioner, ProvisionerRegistry
from .storage import StorageServiceImpl, create_default_storage_client
from .vault import GcpSecretManagerVault

logger = logging.getLogger(__name__)


def build_vault(config: VaultConfig) -> GcpSecretManagerVault:
    if config.service_account_file:
        path = Path(config.service_account_file)
        if not path.exists():
            raise FileNotFoundError(f"Service account file not found: {path}")
        logger.info("Creating Secret Manager vault for %s with service account credentials", config.project)
        with open(path) as credential_stream:
            return GcpSecretManagerVault.create_with_service_account_credentials(
                config.project, config.region, credential_stream
            )
    logger.info("Creating Secret Manager vault for %s with default credentials", config.project)
    return GcpSecretManagerVault.create_with_default_settings(config.project, config.region)


def build_provisioner_registry(
    config: AppConfig,
    iam_service: Optional[IamService] = None,
    storage_service: Optional[StorageService] = None,
) -> ProvisionerRegistry:
    iam_service = iam_service or IamServiceImpl(config.gcp)
    if storage_service is None:
        storage_service = StorageServiceImpl(
            create_default_storage_client(config.gcp.project_id),
            provider_role=config.provision.provider_role,
        )
    return ProvisionerRegistry(
        [
            BigQueryProvisioner(config.gcp, BigQueryFactory(config.gcp, iam_service), iam_service),
            GcsProvisioner(config.gcp, storage_service, iam_service),
        ]
    )
