"""Provisioner creating GCS buckets as transfer destinations."""

from __future__ import annotations

import logging

from google.api_core import exceptions as gcp_exceptions

from ..config import GcpConfiguration
from ..interfaces import ADC_SERVICE_ACCOUNT, GCS_SCOPE, IamService, Provisioner, StorageService
from ..models import EDC_NAMESPACE, DataAddress, GcpException
from ..result import ResponseStatus, StatusResult
from ..storage import GcsStoreSchema
from .resources import (
    DeprovisionedResource,
    GcsProvisionedResource,
    GcsResourceDefinition,
    ProvisionResponse,
    ResourceKind,
)

logger = logging.getLogger(__name__)

RESOURCE_NAME_SUFFIX = "-bucket"


class GcsProvisioner(Provisioner):
    kind = ResourceKind.GCS

    def __init__(
        self,
        configuration: GcpConfiguration,
        storage_service: StorageService,
        iam_service: IamService,
    ) -> None:
        self._configuration = configuration
        self._storage_service = storage_service
        self._iam_service = iam_service

    def provision(self, resource_definition: GcsResourceDefinition) -> StatusResult:
        bucket_name = resource_definition.bucket_name or resource_definition.transfer_process_id
        if not bucket_name:
            return StatusResult.failure(
                ResponseStatus.FATAL_ERROR,
                f"Resource definition {resource_definition.id} has neither bucket name nor transfer process id",
            )
        location = resource_definition.location
        logger.info("GCS Provisioner provision bucket %s in %s", bucket_name, location)

        try:
            service_account = self._iam_service.get_service_account(resource_definition.service_account_name)
            bucket = self._storage_service.get_or_create_bucket(bucket_name, location)
            if service_account != ADC_SERVICE_ACCOUNT:
                self._storage_service.add_provider_permissions(bucket, service_account)
            token = self._iam_service.create_access_token(service_account, GCS_SCOPE)
        except (GcpException, gcp_exceptions.GoogleAPICallError) as exc:
            logger.warning("GCS Provisioner failed for bucket %s: %s", bucket_name, exc)
            return StatusResult.failure(ResponseStatus.FATAL_ERROR, str(exc))

        properties = {
            EDC_NAMESPACE + GcsStoreSchema.BUCKET_NAME: bucket.name,
            EDC_NAMESPACE + GcsStoreSchema.LOCATION: location,
            EDC_NAMESPACE + GcsStoreSchema.STORAGE_CLASS: resource_definition.storage_class,
            EDC_NAMESPACE + GcsStoreSchema.SERVICE_ACCOUNT_NAME: service_account.name,
            EDC_NAMESPACE + GcsStoreSchema.SERVICE_ACCOUNT_EMAIL: service_account.email,
        }
        resource = GcsProvisionedResource(
            id=resource_definition.id,
            transfer_process_id=resource_definition.transfer_process_id,
            resource_definition_id=resource_definition.id,
            resource_name=bucket.name + RESOURCE_NAME_SUFFIX,
            data_address=DataAddress(type=GcsStoreSchema.TYPE, properties=properties),
            has_token=True,
        )
        return StatusResult.success(ProvisionResponse(resource=resource, secret_token=token))

    def deprovision(self, provisioned_resource: GcsProvisionedResource) -> StatusResult:
        bucket_name = provisioned_resource.bucket_name
        try:
            deleted = self._storage_service.delete_bucket(bucket_name)
        except GcpException as exc:
            return StatusResult.failure(ResponseStatus.ERROR_RETRY, str(exc))
        if not deleted:
            logger.info("GCS Provisioner bucket %s was already gone", bucket_name)
        return StatusResult.success(DeprovisionedResource(provisioned_resource_id=provisioned_resource.id))
