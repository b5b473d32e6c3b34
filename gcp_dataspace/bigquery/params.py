"""Request parameters for BigQuery data flows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models import DataAddress, DataFlowStartMessage
from .data_address import BigQueryDataAddress


@dataclass(frozen=True)
class BigQueryRequestParams:
    project: Optional[str]
    dataset: Optional[str]
    table: Optional[str]
    query: Optional[str] = None
    service_account_name: Optional[str] = None
    sink_address: Optional[DataAddress] = None
    destination_table: Optional[str] = None


class BigQueryRequestParamsProvider:
    def provide_source_params(self, message: DataFlowStartMessage) -> BigQueryRequestParams:
        source = BigQueryDataAddress.from_data_address(message.source_data_address)
        return _params(
            source,
            sink_address=message.destination_data_address,
            destination_table=source.destination_table,
        )

    def provide_sink_params(self, message: DataFlowStartMessage) -> BigQueryRequestParams:
        return _params(BigQueryDataAddress.from_data_address(message.destination_data_address))


def _params(address: BigQueryDataAddress, **extra) -> BigQueryRequestParams:
    return BigQueryRequestParams(
        project=address.project,
        dataset=address.dataset,
        table=address.table,
        query=address.query,
        service_account_name=address.service_account_name,
        **extra,
    )
