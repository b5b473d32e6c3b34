"""IAM service: service account lookup, access tokens and credentials."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

import google.auth
from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.auth import impersonated_credentials
from google.auth.credentials import Credentials
from google.auth.transport.requests import Request
from google.cloud import iam_admin_v1, iam_credentials_v1
from google.oauth2 import credentials as oauth2_credentials

from .config import GcpConfiguration
from .interfaces import ADC_SERVICE_ACCOUNT, IAM_SCOPE, IamService
from .models import GcpAccessToken, GcpException, GcpServiceAccount

logger = logging.getLogger(__name__)

ONE_HOUR_IN_S = 3600

CredentialsProvider = Callable[[Sequence[str]], Credentials]


def default_credentials(scopes: Sequence[str]) -> Credentials:
    """Application Default Credentials restricted to scopes."""
    credentials, _ = google.auth.default(scopes=list(scopes))
    return credentials


def service_account_email(name: str, project: str) -> str:
    return f"{name}@{project}.iam.gserviceaccount.com"


class IamServiceImpl(IamService):
    """IAM service using the IAM admin and IAM credentials APIs.

    Client factories and the credentials provider default to the real
    Google implementations and can be replaced for testing.
    """

    def __init__(
        self,
        configuration: GcpConfiguration,
        iam_client_factory: Callable[[], iam_admin_v1.IAMClient] = iam_admin_v1.IAMClient,
        iam_credentials_client_factory: Callable[
            [], iam_credentials_v1.IAMCredentialsClient
        ] = iam_credentials_v1.IAMCredentialsClient,
        credentials_provider: CredentialsProvider = default_credentials,
        request_factory: Callable[[], Request] = Request,
    ) -> None:
        if configuration is None:
            raise ValueError("IamServiceImpl requires a GcpConfiguration")
        self._configuration = configuration
        self._iam_client_factory = iam_client_factory
        self._iam_credentials_client_factory = iam_credentials_client_factory
        self._credentials_provider = credentials_provider
        self._request_factory = request_factory

    def get_service_account(self, service_account_name: Optional[str]) -> GcpServiceAccount:
        if service_account_name is None:
            service_account_name = self._configuration.service_account_name
        if service_account_name is None:
            return ADC_SERVICE_ACCOUNT

        project = self._configuration.project_id
        email = service_account_email(service_account_name, project)
        name = f"projects/{project}/serviceAccounts/{email}"
        try:
            with self._create_client(self._iam_client_factory, "IAMClient") as client:
                response = client.get_service_account(request={"name": name})
        except gcp_exceptions.NotFound as exc:
            logger.error("Service account '%s' not found", service_account_name, exc_info=True)
            raise GcpException(f"Service account '{service_account_name}' not found") from exc
        except gcp_exceptions.GoogleAPICallError as exc:
            logger.error("Unable to get service account '%s'", service_account_name, exc_info=True)
            raise GcpException(f"Unable to get service account '{service_account_name}'") from exc

        return GcpServiceAccount(
            email=response.email,
            name=response.name,
            description=response.description,
        )

    def create_access_token(self, service_account: GcpServiceAccount, *scopes: str) -> GcpAccessToken:
        if service_account == ADC_SERVICE_ACCOUNT:
            credentials = self._load_credentials(scopes)
            self._refresh(credentials)
            return GcpAccessToken(
                token=credentials.token,
                expiration=_to_epoch_millis(credentials.expiry),
            )

        try:
            with self._create_client(self._iam_credentials_client_factory, "IAMCredentialsClient") as client:
                response = client.generate_access_token(
                    request={
                        "name": f"projects/-/serviceAccounts/{service_account.email}",
                        "scope": list(scopes),
                        "lifetime": {"seconds": ONE_HOUR_IN_S},
                    }
                )
        except gcp_exceptions.GoogleAPICallError as exc:
            raise GcpException(f"Error creating service account token: {exc}") from exc

        logger.debug("Created access token for %s", service_account.email)
        return GcpAccessToken(
            token=response.access_token,
            expiration=_to_epoch_millis(response.expire_time),
        )

    def get_token_credentials(self, access_token: GcpAccessToken) -> Credentials:
        expiry = datetime.fromtimestamp(access_token.expiration / 1000, tz=timezone.utc)
        # google-auth compares expiry against naive UTC datetimes
        return oauth2_credentials.Credentials(
            token=access_token.token,
            expiry=expiry.replace(tzinfo=None),
        )

    def get_credentials(self, service_account: GcpServiceAccount, *scopes: str) -> Credentials:
        if service_account == ADC_SERVICE_ACCOUNT:
            credentials = self._load_credentials(scopes)
            self._refresh(credentials)
            logger.debug("Credentials for project '%s' using ADC", self._configuration.project_id)
            return credentials

        source_credentials = self._load_credentials([IAM_SCOPE])
        self._refresh(source_credentials)
        logger.debug(
            "Credentials for project '%s' using service account '%s'",
            self._configuration.project_id,
            service_account.name,
        )
        return impersonated_credentials.Credentials(
            source_credentials=source_credentials,
            target_principal=service_account.email,
            target_scopes=list(scopes),
            lifetime=ONE_HOUR_IN_S,
        )

    def _create_client(self, factory: Callable[[], Any], client_name: str) -> Any:
        try:
            return factory()
        except (auth_exceptions.GoogleAuthError, gcp_exceptions.GoogleAPIError) as exc:
            logger.error("Error while creating %s", client_name, exc_info=True)
            raise GcpException(f"Error while creating {client_name}: {exc}") from exc

    def _load_credentials(self, scopes: Sequence[str]) -> Credentials:
        try:
            return self._credentials_provider(scopes)
        except auth_exceptions.GoogleAuthError as exc:
            logger.error("Error while loading default credentials", exc_info=True)
            raise GcpException(f"Error while loading default credentials: {exc}") from exc

    def _refresh(self, credentials: Credentials) -> None:
        try:
            credentials.refresh(self._request_factory())
        except auth_exceptions.GoogleAuthError as exc:
            raise GcpException(f"Error while refreshing credentials: {exc}") from exc


def _to_epoch_millis(value: Optional[datetime]) -> int:
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp()) * 1000
