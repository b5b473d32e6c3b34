"""BigQuery targets and data addresses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from google.cloud import bigquery

from ..models import DataAddress
from . import schema


@dataclass(frozen=True)
class BigQueryTarget:
    project: str
    dataset: str
    table: Optional[str]

    @property
    def table_id(self) -> bigquery.TableReference:
        return bigquery.TableReference(bigquery.DatasetReference(self.project, self.dataset), self.table)

    @property
    def table_name(self) -> str:
        return f"{self.project}.{self.dataset}.{self.table}"


@dataclass(frozen=True)
class BigQueryDataAddress:
    """Typed view over a DataAddress carrying BigQuery properties."""

    project: Optional[str] = None
    dataset: Optional[str] = None
    table: Optional[str] = None
    query: Optional[str] = None
    service_account_name: Optional[str] = None
    customer_name: Optional[str] = None
    destination_table: Optional[str] = None

    @classmethod
    def from_data_address(cls, address: DataAddress) -> "BigQueryDataAddress":
        return cls(
            project=address.get_string_property(schema.PROJECT),
            dataset=address.get_string_property(schema.DATASET),
            table=address.get_string_property(schema.TABLE),
            query=address.get_string_property(schema.QUERY),
            service_account_name=address.get_string_property(schema.SERVICE_ACCOUNT_NAME),
            customer_name=address.get_string_property(schema.CUSTOMER_NAME),
            destination_table=address.get_string_property(schema.DESTINATION_TABLE),
        )

    def to_data_address(self) -> DataAddress:
        properties = {
            schema.PROJECT: self.project,
            schema.DATASET: self.dataset,
            schema.TABLE: self.table,
            schema.QUERY: self.query,
            schema.SERVICE_ACCOUNT_NAME: self.service_account_name,
            schema.CUSTOMER_NAME: self.customer_name,
            schema.DESTINATION_TABLE: self.destination_table,
        }
        return DataAddress(
            type=schema.BIGQUERY_DATA,
            properties={key: value for key, value in properties.items() if value is not None},
        )
