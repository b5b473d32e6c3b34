"""Resource definitions and provisioned resources for BigQuery and GCS."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from ..bigquery import schema as bq_schema
from ..models import EDC_NAMESPACE, KEY_NAME, DataAddress, GcpAccessToken
from ..storage import GcsStoreSchema


class ResourceKind(str, Enum):
    BIGQUERY = "bigquery"
    GCS = "gcs"


@dataclass
class ResourceDefinition:
    id: str
    transfer_process_id: Optional[str] = None

    kind: ClassVar[ResourceKind]

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id")


@dataclass
class BigQueryResourceDefinition(ResourceDefinition):
    properties: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[ResourceKind] = ResourceKind.BIGQUERY

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.dataset is None:
            raise ValueError(bq_schema.DATASET)
        if self.table is None:
            raise ValueError(bq_schema.TABLE)

    def _get_string(self, key: str) -> Optional[str]:
        value = self.properties.get(EDC_NAMESPACE + key, self.properties.get(key))
        return None if value is None else str(value)

    @property
    def project(self) -> Optional[str]:
        return self._get_string(bq_schema.PROJECT)

    @property
    def dataset(self) -> Optional[str]:
        return self._get_string(bq_schema.DATASET)

    @property
    def table(self) -> Optional[str]:
        return self._get_string(bq_schema.TABLE)

    @property
    def query(self) -> Optional[str]:
        return self._get_string(bq_schema.QUERY)

    @property
    def service_account_name(self) -> Optional[str]:
        return self._get_string(bq_schema.SERVICE_ACCOUNT_NAME)

    @property
    def customer_name(self) -> Optional[str]:
        return self._get_string(bq_schema.CUSTOMER_NAME)


@dataclass
class GcsResourceDefinition(ResourceDefinition):
    location: Optional[str] = None
    storage_class: Optional[str] = None
    # when missing the provisioner derives one from the transfer process id
    bucket_name: Optional[str] = None
    service_account_name: Optional[str] = None

    kind: ClassVar[ResourceKind] = ResourceKind.GCS

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.location is None:
            raise ValueError("location")
        if self.storage_class is None:
            raise ValueError("storage_class")


@dataclass
class ProvisionedResource:
    id: str
    transfer_process_id: Optional[str]
    resource_definition_id: str
    resource_name: str
    data_address: DataAddress
    has_token: bool = False

    kind: ClassVar[ResourceKind]

    def __post_init__(self) -> None:
        properties = dict(self.data_address.properties)
        properties[KEY_NAME] = self.resource_name
        self.data_address = DataAddress(type=self.data_address.type, properties=properties)


@dataclass
class BigQueryProvisionedResource(ProvisionedResource):
    kind: ClassVar[ResourceKind] = ResourceKind.BIGQUERY

    @property
    def project(self) -> Optional[str]:
        return self.data_address.get_string_property(bq_schema.PROJECT)

    @property
    def dataset(self) -> Optional[str]:
        return self.data_address.get_string_property(bq_schema.DATASET)

    @property
    def table(self) -> Optional[str]:
        return self.data_address.get_string_property(bq_schema.TABLE)

    @property
    def query(self) -> Optional[str]:
        return self.data_address.get_string_property(bq_schema.QUERY)

    @property
    def service_account_name(self) -> Optional[str]:
        return self.data_address.get_string_property(bq_schema.SERVICE_ACCOUNT_NAME)

    @property
    def customer_name(self) -> Optional[str]:
        return self.data_address.get_string_property(bq_schema.CUSTOMER_NAME)


@dataclass
class GcsProvisionedResource(ProvisionedResource):
    kind: ClassVar[ResourceKind] = ResourceKind.GCS

    @property
    def bucket_name(self) -> Optional[str]:
        return self.data_address.get_string_property(GcsStoreSchema.BUCKET_NAME)

    @property
    def location(self) -> Optional[str]:
        return self.data_address.get_string_property(GcsStoreSchema.LOCATION)

    @property
    def storage_class(self) -> Optional[str]:
        return self.data_address.get_string_property(GcsStoreSchema.STORAGE_CLASS)

    @property
    def service_account_name(self) -> Optional[str]:
        return self.data_address.get_string_property(GcsStoreSchema.SERVICE_ACCOUNT_NAME)

    @property
    def service_account_email(self) -> Optional[str]:
        return self.data_address.get_string_property(GcsStoreSchema.SERVICE_ACCOUNT_EMAIL)


@dataclass
class ProvisionResponse:
    resource: ProvisionedResource
    secret_token: Optional[GcpAccessToken] = None


@dataclass
class DeprovisionedResource:
    provisioned_resource_id: str
