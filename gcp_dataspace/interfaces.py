"""Interface definitions for vaults, cloud services and provisioners."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from .models import GcpAccessToken, GcpServiceAccount, GcsBucket
from .result import Result, StatusResult

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

    from .provision.resources import ProvisionedResource, ResourceDefinition, ResourceKind

IAM_SCOPE = "https://www.googleapis.com/auth/iam"
BQ_SCOPE = "https://www.googleapis.com/auth/bigquery"
GCS_SCOPE = "https://www.googleapis.com/auth/devstorage.read_write"

ADC_SERVICE_ACCOUNT = GcpServiceAccount(
    email="adc-email",
    name="adc-name",
    description="Application Default Credentials",
)


class Vault(ABC):
    """Key/value store for secrets."""

    @abstractmethod
    def resolve_secret(self, key: str) -> Optional[str]:
        """Return the secret stored under key, or None when it cannot be read."""

    @abstractmethod
    def store_secret(self, key: str, value: str) -> Result:
        """Store value under key without overwriting an existing secret."""

    @abstractmethod
    def delete_secret(self, key: str) -> Result:
        """Remove the secret stored under key."""


class IamService(ABC):
    """Service accounts, access tokens and credentials."""

    @abstractmethod
    def get_service_account(self, service_account_name: Optional[str]) -> GcpServiceAccount:
        """Resolve a service account by short name; None selects the configured default."""

    @abstractmethod
    def create_access_token(self, service_account: GcpServiceAccount, *scopes: str) -> GcpAccessToken:
        """Create a short-lived OAuth2 access token for the service account."""

    @abstractmethod
    def get_token_credentials(self, access_token: GcpAccessToken) -> "Credentials":
        """Wrap an existing access token into credentials."""

    @abstractmethod
    def get_credentials(self, service_account: GcpServiceAccount, *scopes: str) -> "Credentials":
        """Credentials acting as the service account for the given scopes."""


class StorageService(ABC):
    """Wrapper around Google Cloud Storage buckets."""

    @abstractmethod
    def get_or_create_bucket(self, bucket_name: str, location: str) -> GcsBucket:
        """Return the bucket, creating it in location when missing."""

    @abstractmethod
    def add_role_binding(self, bucket: GcsBucket, service_account: GcpServiceAccount, role: str) -> None:
        """Grant role on the bucket to the service account."""

    @abstractmethod
    def add_provider_permissions(self, bucket: GcsBucket, service_account: GcpServiceAccount) -> None:
        """Grant the data provider's account permission to upload into the bucket."""

    @abstractmethod
    def delete_bucket(self, bucket_name: str) -> bool:
        """Delete the bucket; False when it did not exist."""

    @abstractmethod
    def is_empty(self, bucket_name: str) -> bool:
        """True when the bucket holds no objects."""


class Provisioner(ABC):
    """Creates and releases the cloud resources backing a transfer."""

    kind: "ResourceKind"

    def can_provision(self, resource_definition: "ResourceDefinition") -> bool:
        return resource_definition.kind == self.kind

    def can_deprovision(self, provisioned_resource: "ProvisionedResource") -> bool:
        return provisioned_resource.kind == self.kind

    @abstractmethod
    def provision(self, resource_definition: "ResourceDefinition") -> StatusResult:
        """Provision the resource; content is a ProvisionResponse on success."""

    @abstractmethod
    def deprovision(self, provisioned_resource: "ProvisionedResource") -> StatusResult:
        """Release the resource; content is a DeprovisionedResource on success."""
