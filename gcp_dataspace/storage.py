"""Google Cloud Storage bucket management."""

from __future__ import annotations

import logging

from google.api_core import exceptions as gcp_exceptions
from google.cloud import storage

from .interfaces import StorageService
from .models import GcpException, GcpServiceAccount, GcsBucket

logger = logging.getLogger(__name__)

PROVIDER_ROLE = "roles/storage.objectCreator"


class GcsStoreSchema:
    """Data address type and property keys for GCS destinations."""

    TYPE = "GoogleCloudStorage"
    BUCKET_NAME = "bucket_name"
    BLOB_NAME = "blob_name"
    LOCATION = "location"
    STORAGE_CLASS = "storage_class"
    SERVICE_ACCOUNT_NAME = "service_account_name"
    SERVICE_ACCOUNT_EMAIL = "service_account_email"


class StorageServiceImpl(StorageService):
    def __init__(self, client: storage.Client, provider_role: str = PROVIDER_ROLE) -> None:
        self._client = client
        self._provider_role = provider_role

    def get_or_create_bucket(self, bucket_name: str, location: str) -> GcsBucket:
        try:
            bucket = self._client.lookup_bucket(bucket_name)
            if bucket is None:
                bucket = self._client.create_bucket(bucket_name, location=location)
                logger.info("Created bucket %s in %s", bucket_name, location)
                return GcsBucket(name=bucket.name)
        except gcp_exceptions.GoogleAPICallError as exc:
            raise GcpException(f"Unable to get or create bucket '{bucket_name}': {exc}") from exc

        # Bucket locations are reported upper case
        if (bucket.location or "").upper() != location.upper():
            raise GcpException(
                f"Bucket '{bucket_name}' already exists in location {bucket.location}, requested {location}"
            )
        logger.debug("Bucket %s already exists", bucket_name)
        return GcsBucket(name=bucket.name)

    def add_role_binding(self, bucket: GcsBucket, service_account: GcpServiceAccount, role: str) -> None:
        member = f"serviceAccount:{service_account.email}"
        try:
            gcs_bucket = self._client.bucket(bucket.name)
            policy = gcs_bucket.get_iam_policy(requested_policy_version=3)
            policy.bindings.append({"role": role, "members": {member}})
            gcs_bucket.set_iam_policy(policy)
        except gcp_exceptions.GoogleAPICallError as exc:
            raise GcpException(f"Unable to bind {role} on bucket '{bucket.name}' to {member}: {exc}") from exc
        logger.debug("Granted %s on bucket %s to %s", role, bucket.name, member)

    def add_provider_permissions(self, bucket: GcsBucket, service_account: GcpServiceAccount) -> None:
        self.add_role_binding(bucket, service_account, self._provider_role)

    def delete_bucket(self, bucket_name: str) -> bool:
        try:
            self._client.bucket(bucket_name).delete()
        except gcp_exceptions.NotFound:
            logger.debug("Bucket %s not found, nothing to delete", bucket_name)
            return False
        except gcp_exceptions.GoogleAPICallError as exc:
            raise GcpException(f"Unable to delete bucket '{bucket_name}': {exc}") from exc
        logger.info("Deleted bucket %s", bucket_name)
        return True

    def is_empty(self, bucket_name: str) -> bool:
        try:
            blobs = self._client.list_blobs(bucket_name, max_results=1)
            return next(iter(blobs), None) is None
        except gcp_exceptions.GoogleAPICallError as exc:
            raise GcpException(f"Unable to list bucket '{bucket_name}': {exc}") from exc


def create_default_storage_client(project_id: str) -> storage.Client:
    """Storage client for project using Application Default Credentials."""
    return storage.Client(project=project_id)
