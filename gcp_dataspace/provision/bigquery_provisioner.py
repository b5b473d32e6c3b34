"""Provisioner checking BigQuery tables and issuing access tokens."""

from __future__ import annotations

import logging

from google.api_core import exceptions as gcp_exceptions

from ..bigquery import BigQueryFactory, BigQueryTarget
from ..bigquery import schema as bq_schema
from ..config import GcpConfiguration
from ..interfaces import BQ_SCOPE, IamService, Provisioner
from ..models import DataAddress, GcpException, GcpServiceAccount
from ..result import ResponseStatus, StatusResult
from .resources import (
    BigQueryProvisionedResource,
    BigQueryResourceDefinition,
    DeprovisionedResource,
    ProvisionResponse,
    ResourceKind,
)

logger = logging.getLogger(__name__)

RESOURCE_NAME_SUFFIX = "-table"


class BigQueryProvisioner(Provisioner):
    kind = ResourceKind.BIGQUERY

    def __init__(
        self,
        configuration: GcpConfiguration,
        bq_factory: BigQueryFactory,
        iam_service: IamService,
    ) -> None:
        self._configuration = configuration
        self._bq_factory = bq_factory
        self._iam_service = iam_service

    def provision(self, resource_definition: BigQueryResourceDefinition) -> StatusResult:
        target = self._get_target(resource_definition)
        logger.info("BigQuery Provisioner provision %s", target.table_name)
        resource_name = target.table + RESOURCE_NAME_SUFFIX

        try:
            service_account = self._iam_service.get_service_account(resource_definition.service_account_name)
            big_query = self._bq_factory.create_big_query(service_account)
            try:
                big_query.get_table(target.table_id)
            except gcp_exceptions.NotFound:
                logger.warning("BigQuery Provisioner table %s DOESN'T exist", target.table_name)
                return StatusResult.failure(
                    ResponseStatus.FATAL_ERROR, f"Table {target.table_name} doesn't exist"
                )
            logger.info("BigQuery Provisioner table %s exists", target.table_name)

            token = self._iam_service.create_access_token(service_account, BQ_SCOPE)
            logger.info("BigQuery Provisioner token ready")
        except (GcpException, gcp_exceptions.GoogleAPICallError) as exc:
            return StatusResult.failure(ResponseStatus.FATAL_ERROR, str(exc))

        resource = self._get_provisioned_resource(resource_definition, resource_name, target, service_account)
        return StatusResult.success(ProvisionResponse(resource=resource, secret_token=token))

    def deprovision(self, provisioned_resource: BigQueryProvisionedResource) -> StatusResult:
        # tables are owned by the provider, nothing to release
        return StatusResult.success(DeprovisionedResource(provisioned_resource_id=provisioned_resource.id))

    def _get_target(self, resource_definition: BigQueryResourceDefinition) -> BigQueryTarget:
        project = resource_definition.project or self._configuration.project_id
        return BigQueryTarget(project, resource_definition.dataset, resource_definition.table)

    def _get_provisioned_resource(
        self,
        resource_definition: BigQueryResourceDefinition,
        resource_name: str,
        target: BigQueryTarget,
        service_account: GcpServiceAccount,
    ) -> BigQueryProvisionedResource:
        properties = dict(resource_definition.properties)
        properties.update(
            {
                bq_schema.PROJECT: target.project,
                bq_schema.DATASET: target.dataset,
                bq_schema.TABLE: target.table,
                bq_schema.SERVICE_ACCOUNT_NAME: service_account.name,
            }
        )
        return BigQueryProvisionedResource(
            id=resource_definition.id,
            transfer_process_id=resource_definition.transfer_process_id,
            resource_definition_id=resource_definition.id,
            resource_name=resource_name,
            data_address=DataAddress(type=bq_schema.BIGQUERY_DATA, properties=properties),
            has_token=True,
        )
