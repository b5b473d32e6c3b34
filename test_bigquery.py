"""Tests for BigQuery data addresses, validation, request params and client creation."""

from unittest import mock

from gcp_dataspace.bigquery import (
    BigQueryDataAddress,
    BigQueryFactory,
    BigQueryRequestParamsProvider,
    BigQueryTarget,
    validate_source_address,
)
from gcp_dataspace.bigquery import schema
from gcp_dataspace.config import GcpConfiguration
from gcp_dataspace.interfaces import ADC_SERVICE_ACCOUNT, BQ_SCOPE
from gcp_dataspace.models import EDC_NAMESPACE, DataAddress, DataFlowStartMessage


def test_source_address_requires_query():
    result = validate_source_address(DataAddress(schema.BIGQUERY_DATA, {schema.TABLE: "t"}))

    assert not result.succeeded
    assert result.violations[0].path == schema.QUERY
    assert result.failure_detail == "Must have a query property"


def test_blank_query_is_rejected():
    result = validate_source_address(DataAddress(schema.BIGQUERY_DATA, {schema.QUERY: "   "}))
    assert not result.succeeded


def test_namespaced_query_is_accepted():
    address = DataAddress(schema.BIGQUERY_DATA, {EDC_NAMESPACE + schema.QUERY: "SELECT 1"})
    assert validate_source_address(address).succeeded


def test_target_names():
    target = BigQueryTarget("proj", "ds", "tbl")

    assert target.table_name == "proj.ds.tbl"
    assert target.table_id.project == "proj"
    assert target.table_id.dataset_id == "ds"
    assert target.table_id.table_id == "tbl"


def test_data_address_round_trip_drops_missing_properties():
    address = BigQueryDataAddress(project="proj", dataset="ds", table="tbl").to_data_address()

    assert address.type == schema.BIGQUERY_DATA
    assert address.properties == {schema.PROJECT: "proj", schema.DATASET: "ds", schema.TABLE: "tbl"}


def test_source_params_include_sink_and_destination_table():
    source = DataAddress(
        schema.BIGQUERY_DATA,
        {
            schema.PROJECT: "proj",
            schema.DATASET: "ds",
            schema.TABLE: "src",
            schema.QUERY: "SELECT * FROM src",
            schema.SERVICE_ACCOUNT_NAME: "reader",
            schema.DESTINATION_TABLE: "dst",
        },
    )
    sink = DataAddress(schema.BIGQUERY_DATA, {schema.PROJECT: "proj2", schema.DATASET: "ds2", schema.TABLE: "out"})
    message = DataFlowStartMessage("process-1", source, sink)

    params = BigQueryRequestParamsProvider().provide_source_params(message)

    assert params.project == "proj"
    assert params.query == "SELECT * FROM src"
    assert params.service_account_name == "reader"
    assert params.sink_address is sink
    assert params.destination_table == "dst"


def test_sink_params_come_from_destination():
    source = DataAddress(schema.BIGQUERY_DATA, {schema.QUERY: "SELECT 1"})
    sink = DataAddress(schema.BIGQUERY_DATA, {schema.PROJECT: "proj2", schema.DATASET: "ds2", schema.TABLE: "out"})

    params = BigQueryRequestParamsProvider().provide_sink_params(DataFlowStartMessage("p", source, sink))

    assert (params.project, params.dataset, params.table) == ("proj2", "ds2", "out")
    assert params.query is None
    assert params.sink_address is None


def test_factory_builds_client_with_service_account_credentials():
    iam_service = mock.Mock()
    factory = BigQueryFactory(GcpConfiguration(project_id="proj"), iam_service)

    with mock.patch("gcp_dataspace.bigquery.factory.bigquery.Client") as client_cls:
        client = factory.create_big_query(ADC_SERVICE_ACCOUNT)

    iam_service.get_credentials.assert_called_once_with(ADC_SERVICE_ACCOUNT, BQ_SCOPE)
    client_cls.assert_called_once_with(project="proj", credentials=iam_service.get_credentials.return_value)
    assert client is client_cls.return_value
