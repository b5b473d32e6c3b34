"""Provisioners for BigQuery tables and GCS buckets."""

from .bigquery_provisioner import BigQueryProvisioner
from .gcs_provisioner import GcsProvisioner
from .registry import ProvisionerRegistry
from .resources import (
    BigQueryProvisionedResource,
    BigQueryResourceDefinition,
    DeprovisionedResource,
    GcsProvisionedResource,
    GcsResourceDefinition,
    ProvisionResponse,
    ResourceKind,
)

__all__ = [
    "BigQueryProvisionedResource",
    "BigQueryProvisioner",
    "BigQueryResourceDefinition",
    "DeprovisionedResource",
    "GcsProvisionedResource",
    "GcsProvisioner",
    "GcsResourceDefinition",
    "ProvisionResponse",
    "ProvisionerRegistry",
    "ResourceKind",
]
