"""Data address type and property keys for BigQuery sources and sinks."""

BIGQUERY_DATA = "BigQueryData"

PROJECT = "project"
DATASET = "dataset"
TABLE = "table"
QUERY = "query"
SERVICE_ACCOUNT_NAME = "service_account_name"
CUSTOMER_NAME = "customer_name"
DESTINATION_TABLE = "destination_table"
