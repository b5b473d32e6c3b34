"""Tests for the BigQuery and GCS provisioners and the provisioner registry."""

import time
from unittest import mock

import pytest
from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions

from gcp_dataspace.bigquery import schema
from gcp_dataspace.config import GcpConfiguration
from gcp_dataspace.iam import IamServiceImpl
from gcp_dataspace.interfaces import ADC_SERVICE_ACCOUNT, BQ_SCOPE, GCS_SCOPE
from gcp_dataspace.models import DataAddress, GcpAccessToken, GcpException, GcpServiceAccount, GcsBucket
from gcp_dataspace.provision import (
    BigQueryProvisionedResource,
    BigQueryProvisioner,
    BigQueryResourceDefinition,
    GcsProvisionedResource,
    GcsProvisioner,
    GcsResourceDefinition,
    ProvisionerRegistry,
    ResourceKind,
)
from gcp_dataspace.result import ResponseStatus

TEST_PROJECT = "test-project"
TEST_DATASET = "test-dataset"
TEST_TABLE = "test-table"
TEST_SERVICE_ACCOUNT_NAME = "edc_test_account"
RESOURCE_ID = "mandatory-id"
TRANSFER_ID = "transfer-id"
CONFIGURATION = GcpConfiguration(project_id=TEST_PROJECT)
SERVICE_ACCOUNT = GcpServiceAccount(
    TEST_SERVICE_ACCOUNT_NAME + "@emailtest.edc", TEST_SERVICE_ACCOUNT_NAME, "service account for tests"
)


def make_token():
    return GcpAccessToken("fdsgfdhgbrty456ghtbrfrdfgvfchfh", int(time.time() + 3600) * 1000)


def bigquery_definition(**extra):
    properties = {
        schema.PROJECT: TEST_PROJECT,
        schema.DATASET: TEST_DATASET,
        schema.TABLE: TEST_TABLE,
        schema.CUSTOMER_NAME: "customer-name",
    }
    properties.update(extra)
    return BigQueryResourceDefinition(id=RESOURCE_ID, transfer_process_id=TRANSFER_ID, properties=properties)


def bigquery_provisioner(service_account):
    iam_service = mock.Mock()
    iam_service.get_service_account.return_value = service_account
    token = make_token()
    iam_service.create_access_token.return_value = token
    bq_factory = mock.Mock()
    return BigQueryProvisioner(CONFIGURATION, bq_factory, iam_service), iam_service, bq_factory, token


def test_bigquery_definition_requires_dataset_and_table():
    with pytest.raises(ValueError, match=schema.DATASET):
        BigQueryResourceDefinition(id=RESOURCE_ID, properties={schema.TABLE: TEST_TABLE})
    with pytest.raises(ValueError, match=schema.TABLE):
        BigQueryResourceDefinition(id=RESOURCE_ID, properties={schema.DATASET: TEST_DATASET})


def test_can_provision_by_kind():
    provisioner, *_ = bigquery_provisioner(ADC_SERVICE_ACCOUNT)
    gcs_definition = GcsResourceDefinition(id="gcs", location="EU", storage_class="STANDARD")

    assert provisioner.can_provision(bigquery_definition())
    assert not provisioner.can_provision(gcs_definition)


def test_can_deprovision_by_kind():
    provisioner, *_ = bigquery_provisioner(ADC_SERVICE_ACCOUNT)
    resource = BigQueryProvisionedResource(
        id=RESOURCE_ID,
        transfer_process_id=TRANSFER_ID,
        resource_definition_id="resource-definition-id",
        resource_name="resource-name",
        data_address=DataAddress(schema.BIGQUERY_DATA),
    )

    assert provisioner.can_deprovision(resource)
    assert resource.data_address.key_name == "resource-name"


def test_bigquery_provision_using_adc():
    provisioner, iam_service, bq_factory, token = bigquery_provisioner(ADC_SERVICE_ACCOUNT)

    result = provisioner.provision(bigquery_definition())

    assert result.succeeded
    iam_service.get_service_account.assert_called_once_with(None)
    iam_service.create_access_token.assert_called_once_with(ADC_SERVICE_ACCOUNT, BQ_SCOPE)
    bq_factory.create_big_query.assert_called_once_with(ADC_SERVICE_ACCOUNT)
    response = result.content
    assert response.secret_token == token
    resource = response.resource
    assert resource.resource_name == TEST_TABLE + "-table"
    assert resource.resource_definition_id == RESOURCE_ID
    assert resource.transfer_process_id == TRANSFER_ID
    assert (resource.project, resource.dataset, resource.table) == (TEST_PROJECT, TEST_DATASET, TEST_TABLE)
    assert resource.service_account_name == ADC_SERVICE_ACCOUNT.name
    assert resource.customer_name == "customer-name"
    assert resource.has_token


def test_bigquery_provision_using_service_account():
    provisioner, iam_service, bq_factory, _ = bigquery_provisioner(SERVICE_ACCOUNT)

    result = provisioner.provision(bigquery_definition(**{schema.SERVICE_ACCOUNT_NAME: TEST_SERVICE_ACCOUNT_NAME}))

    assert result.succeeded
    iam_service.get_service_account.assert_called_once_with(TEST_SERVICE_ACCOUNT_NAME)
    iam_service.create_access_token.assert_called_once_with(SERVICE_ACCOUNT, BQ_SCOPE)
    assert result.content.resource.service_account_name == TEST_SERVICE_ACCOUNT_NAME


def test_bigquery_project_defaults_to_configuration():
    provisioner, _, bq_factory, _ = bigquery_provisioner(ADC_SERVICE_ACCOUNT)
    definition = BigQueryResourceDefinition(
        id=RESOURCE_ID, properties={schema.DATASET: TEST_DATASET, schema.TABLE: TEST_TABLE}
    )

    result = provisioner.provision(definition)

    table_id = bq_factory.create_big_query.return_value.get_table.call_args.args[0]
    assert table_id.project == TEST_PROJECT
    assert result.content.resource.project == TEST_PROJECT


def test_bigquery_provision_fails_if_table_does_not_exist():
    provisioner, iam_service, bq_factory, _ = bigquery_provisioner(SERVICE_ACCOUNT)
    bq_factory.create_big_query.return_value.get_table.side_effect = gcp_exceptions.NotFound("no table")

    result = provisioner.provision(bigquery_definition())

    assert result.failed
    assert result.status == ResponseStatus.FATAL_ERROR
    assert "doesn't exist" in result.failure_detail
    iam_service.create_access_token.assert_not_called()


def test_bigquery_provision_fails_on_iam_error():
    provisioner, iam_service, _, _ = bigquery_provisioner(SERVICE_ACCOUNT)
    iam_service.get_service_account.side_effect = GcpException("Service account 'x' not found")

    result = provisioner.provision(bigquery_definition())

    assert result.failed
    assert result.failure_detail == "Service account 'x' not found"


def test_bigquery_deprovision_always_succeeds():
    provisioner, *_ = bigquery_provisioner(ADC_SERVICE_ACCOUNT)
    resource = BigQueryProvisionedResource(
        id=RESOURCE_ID,
        transfer_process_id=TRANSFER_ID,
        resource_definition_id=RESOURCE_ID,
        resource_name="name",
        data_address=DataAddress(schema.BIGQUERY_DATA),
    )

    result = provisioner.deprovision(resource)

    assert result.succeeded
    assert result.content.provisioned_resource_id == RESOURCE_ID


def gcs_provisioner(service_account):
    iam_service = mock.Mock()
    iam_service.get_service_account.return_value = service_account
    iam_service.create_access_token.return_value = make_token()
    storage_service = mock.Mock()
    storage_service.get_or_create_bucket.side_effect = lambda name, location: GcsBucket(name)
    return GcsProvisioner(CONFIGURATION, storage_service, iam_service), iam_service, storage_service


def test_gcs_definition_requires_location_and_storage_class():
    with pytest.raises(ValueError, match="location"):
        GcsResourceDefinition(id="gcs", storage_class="STANDARD")
    with pytest.raises(ValueError, match="storage_class"):
        GcsResourceDefinition(id="gcs", location="EU")


def test_gcs_provision_names_bucket_after_transfer_process():
    provisioner, iam_service, storage_service = gcs_provisioner(SERVICE_ACCOUNT)
    definition = GcsResourceDefinition(
        id=RESOURCE_ID, transfer_process_id=TRANSFER_ID, location="EU", storage_class="STANDARD"
    )

    result = provisioner.provision(definition)

    assert result.succeeded
    storage_service.get_or_create_bucket.assert_called_once_with(TRANSFER_ID, "EU")
    storage_service.add_provider_permissions.assert_called_once_with(GcsBucket(TRANSFER_ID), SERVICE_ACCOUNT)
    iam_service.create_access_token.assert_called_once_with(SERVICE_ACCOUNT, GCS_SCOPE)
    resource = result.content.resource
    assert resource.bucket_name == TRANSFER_ID
    assert resource.location == "EU"
    assert resource.storage_class == "STANDARD"
    assert resource.service_account_email == SERVICE_ACCOUNT.email
    assert resource.resource_name == TRANSFER_ID + "-bucket"


def test_gcs_provision_with_adc_skips_permissions():
    provisioner, _, storage_service = gcs_provisioner(ADC_SERVICE_ACCOUNT)
    definition = GcsResourceDefinition(
        id=RESOURCE_ID, bucket_name="explicit-bucket", location="EU", storage_class="STANDARD"
    )

    result = provisioner.provision(definition)

    assert result.succeeded
    assert result.content.resource.bucket_name == "explicit-bucket"
    storage_service.add_provider_permissions.assert_not_called()


def test_gcs_provision_failure():
    provisioner, _, storage_service = gcs_provisioner(SERVICE_ACCOUNT)
    storage_service.get_or_create_bucket.side_effect = GcpException("bucket in other location")
    definition = GcsResourceDefinition(
        id=RESOURCE_ID, transfer_process_id=TRANSFER_ID, location="EU", storage_class="STANDARD"
    )

    result = provisioner.provision(definition)

    assert result.failed
    assert result.status == ResponseStatus.FATAL_ERROR


def test_gcs_provision_api_error_is_fatal():
    provisioner, _, storage_service = gcs_provisioner(SERVICE_ACCOUNT)
    storage_service.add_provider_permissions.side_effect = gcp_exceptions.Forbidden("no setIamPolicy")
    definition = GcsResourceDefinition(
        id=RESOURCE_ID, transfer_process_id=TRANSFER_ID, location="EU", storage_class="STANDARD"
    )

    result = provisioner.provision(definition)

    assert result.status == ResponseStatus.FATAL_ERROR
    assert "no setIamPolicy" in result.failure_detail


def test_gcs_provision_without_credentials_is_fatal():
    def missing_adc():
        raise auth_exceptions.DefaultCredentialsError("no ADC")

    iam_service = IamServiceImpl(CONFIGURATION, iam_client_factory=missing_adc)
    provisioner = GcsProvisioner(CONFIGURATION, mock.Mock(), iam_service)
    definition = GcsResourceDefinition(
        id=RESOURCE_ID,
        transfer_process_id=TRANSFER_ID,
        location="EU",
        storage_class="STANDARD",
        service_account_name=TEST_SERVICE_ACCOUNT_NAME,
    )

    result = provisioner.provision(definition)

    assert result.failed
    assert result.status == ResponseStatus.FATAL_ERROR
    assert "Error while creating IAMClient" in result.failure_detail


def test_provisioned_resource_leaves_caller_address_untouched():
    address = DataAddress(schema.BIGQUERY_DATA, {schema.TABLE: TEST_TABLE})

    resource = BigQueryProvisionedResource(
        id=RESOURCE_ID,
        transfer_process_id=TRANSFER_ID,
        resource_definition_id=RESOURCE_ID,
        resource_name="name",
        data_address=address,
    )

    assert address.properties == {schema.TABLE: TEST_TABLE}
    assert resource.data_address.key_name == "name"
    assert resource.table == TEST_TABLE


def test_gcs_deprovision_deletes_bucket():
    provisioner, _, storage_service = gcs_provisioner(SERVICE_ACCOUNT)
    storage_service.delete_bucket.return_value = True
    definition = GcsResourceDefinition(
        id=RESOURCE_ID, transfer_process_id=TRANSFER_ID, location="EU", storage_class="STANDARD"
    )
    resource = provisioner.provision(definition).content.resource

    result = provisioner.deprovision(resource)

    assert result.succeeded
    storage_service.delete_bucket.assert_called_once_with(TRANSFER_ID)


def test_registry_dispatches_on_kind():
    bigquery, *_ = bigquery_provisioner(ADC_SERVICE_ACCOUNT)
    gcs, _, storage_service = gcs_provisioner(ADC_SERVICE_ACCOUNT)
    registry = ProvisionerRegistry([bigquery, gcs])

    assert registry.get(ResourceKind.BIGQUERY) is bigquery
    result = registry.provision(
        GcsResourceDefinition(id=RESOURCE_ID, transfer_process_id=TRANSFER_ID, location="EU", storage_class="STANDARD")
    )
    assert isinstance(result.content.resource, GcsProvisionedResource)
    storage_service.get_or_create_bucket.assert_called_once()


def test_registry_rejects_unknown_and_duplicate_kinds():
    bigquery, *_ = bigquery_provisioner(ADC_SERVICE_ACCOUNT)
    registry = ProvisionerRegistry([bigquery])

    with pytest.raises(ValueError, match="Unknown resource kind"):
        registry.provision(GcsResourceDefinition(id="gcs", location="EU", storage_class="STANDARD"))
    with pytest.raises(ValueError, match="already registered"):
        registry.register(bigquery)
