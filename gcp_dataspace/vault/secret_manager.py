"""Vault implementation backed by Google Cloud Secret Manager."""

from __future__ import annotations

import json
import logging
from typing import IO, Optional, Union

from google.api_core import exceptions as gcp_exceptions
from google.cloud import secretmanager
from google.oauth2 import service_account
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..interfaces import Vault
from ..result import Result
from .key_sanitizer import normalize_key

logger = logging.getLogger(__name__)

LATEST_VERSION_ALIAS = "latest"

SECRET_NOT_FOUND_MSG = "Secret not found or has no version"
SECRET_ALREADY_EXISTING_MSG = "Secret already exists"
RUNTIME_ERROR_MSG = "Runtime error"
EXCEPTION_MSG = "Exception"

RESOLVE_SECRET_FUNCTION = "resolving secret"
STORE_SECRET_FUNCTION = "storing secret"
DELETE_SECRET_FUNCTION = "deleting secret"

# domain conditions the caller is expected to handle
_EXPECTED_ERRORS = (gcp_exceptions.NotFound, gcp_exceptions.AlreadyExists)

_backend_retry = retry(
    retry=retry_if_exception_type(
        (gcp_exceptions.ServiceUnavailable, gcp_exceptions.DeadlineExceeded)
    ),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)

# a create that hit its deadline may still have landed, retrying it reports AlreadyExists
_create_retry = retry(
    retry=retry_if_exception_type(gcp_exceptions.ServiceUnavailable),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GcpSecretManagerVault(Vault):
    """Stores, resolves and deletes secrets in a single GCP project.

    Keys are normalized with :func:`normalize_key` before they are turned
    into Secret Manager resource names. Secrets are never overwritten: storing
    under a key that already exists fails.
    """

    def __init__(
        self,
        project: str,
        region: str,
        client: secretmanager.SecretManagerServiceClient,
    ) -> None:
        if not project:
            raise ValueError("GcpSecretManagerVault requires a project")
        if not region:
            raise ValueError("GcpSecretManagerVault requires a region")
        self._project = project
        self._region = region
        self._client = client

    @classmethod
    def create_with_default_settings(cls, project: str, region: str) -> "GcpSecretManagerVault":
        """Build a vault authenticated with Application Default Credentials."""
        return cls(project, region, secretmanager.SecretManagerServiceClient())

    @classmethod
    def create_with_service_account_credentials(
        cls,
        project: str,
        region: str,
        credential_stream: IO[Union[str, bytes]],
    ) -> "GcpSecretManagerVault":
        """Build a vault authenticated with a service account JSON key."""
        info = json.load(credential_stream)
        credentials = service_account.Credentials.from_service_account_info(info)
        client = secretmanager.SecretManagerServiceClient(credentials=credentials)
        return cls(project, region, client)

    def resolve_secret(self, key: str) -> Optional[str]:
        """Return the latest value stored under ``key``, or None."""
        key = normalize_key(key)
        try:
            response = self._access_latest_version(key)
            return response.payload.data.decode("utf-8")
        except Exception as exc:
            self._handle_exception(RESOLVE_SECRET_FUNCTION, key, exc)
        return None

    def store_secret(self, key: str, value: str) -> Result:
        """Create a secret under ``key`` holding ``value``.

        A secret whose first version cannot be written is deleted again so
        the key is not left holding an empty secret.
        """
        key = normalize_key(key)
        try:
            secret = self._create_secret(key)
        except Exception as exc:
            return self._handle_exception(STORE_SECRET_FUNCTION, key, exc)

        try:
            self._add_version(secret.name, value)
        except Exception as exc:
            self._remove_empty_secret(secret.name)
            return self._handle_exception(STORE_SECRET_FUNCTION, key, exc)
        return Result.success()

    def delete_secret(self, key: str) -> Result:
        """Delete the secret stored under ``key`` with all its versions."""
        key = normalize_key(key)
        try:
            self._delete(self._secret_name(key))
            return Result.success()
        except Exception as exc:
            return self._handle_exception(DELETE_SECRET_FUNCTION, key, exc)

    def _secret_name(self, key: str) -> str:
        return f"projects/{self._project}/secrets/{key}"

    @_backend_retry
    def _access_latest_version(self, key: str):
        name = f"{self._secret_name(key)}/versions/{LATEST_VERSION_ALIAS}"
        return self._client.access_secret_version(request={"name": name})

    @_create_retry
    def _create_secret(self, key: str):
        secret = {
            "replication": {
                "user_managed": {"replicas": [{"location": self._region}]},
            },
        }
        return self._client.create_secret(
            request={
                "parent": f"projects/{self._project}",
                "secret_id": key,
                "secret": secret,
            }
        )

    @_backend_retry
    def _add_version(self, secret_name: str, value: str):
        return self._client.add_secret_version(
            request={"parent": secret_name, "payload": {"data": value.encode("utf-8")}}
        )

    @_backend_retry
    def _delete(self, secret_name: str) -> None:
        self._client.delete_secret(request={"name": secret_name})

    def _remove_empty_secret(self, secret_name: str) -> None:
        try:
            self._delete(secret_name)
            logger.debug("Removed secret %s after its value could not be stored", secret_name)
        except Exception:
            logger.error("Unable to remove empty secret %s", secret_name, exc_info=True)

    def _handle_exception(self, function: str, key: str, exc: Exception) -> Result:
        if isinstance(exc, gcp_exceptions.NotFound):
            message = f"{SECRET_NOT_FOUND_MSG} {key}"
        elif isinstance(exc, gcp_exceptions.AlreadyExists):
            message = f"{SECRET_ALREADY_EXISTING_MSG} {key}"
        elif isinstance(exc, gcp_exceptions.GoogleAPICallError):
            message = f"{RUNTIME_ERROR_MSG} {key}"
        else:
            message = f"{EXCEPTION_MSG} {key}"

        if isinstance(exc, _EXPECTED_ERRORS):
            logger.debug("%s: %s", message, exc)
        else:
            logger.error("%s: %s", message, exc, exc_info=True)
        return Result.failure(f"({function}){message}: {exc}")
