"""Creates BigQuery clients acting as a given service account."""

from __future__ import annotations

import logging

from google.cloud import bigquery

from ..config import GcpConfiguration
from ..interfaces import BQ_SCOPE, IamService
from ..models import GcpServiceAccount

logger = logging.getLogger(__name__)


class BigQueryFactory:
    def __init__(self, configuration: GcpConfiguration, iam_service: IamService) -> None:
        self._configuration = configuration
        self._iam_service = iam_service

    def create_big_query(self, service_account: GcpServiceAccount) -> bigquery.Client:
        credentials = self._iam_service.get_credentials(service_account, BQ_SCOPE)
        logger.debug("Creating BigQuery client for service account %s", service_account.name)
        return bigquery.Client(project=self._configuration.project_id, credentials=credentials)
