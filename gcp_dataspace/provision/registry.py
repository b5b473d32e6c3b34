"""Provisioner registry keyed on resource kind."""

from __future__ import annotations

import logging
from typing import Dict, Iterable

from ..interfaces import Provisioner
from ..result import StatusResult
from .resources import ProvisionedResource, ResourceDefinition, ResourceKind

logger = logging.getLogger(__name__)


class ProvisionerRegistry:
    def __init__(self, provisioners: Iterable[Provisioner] = ()) -> None:
        self._provisioners: Dict[ResourceKind, Provisioner] = {}
        for provisioner in provisioners:
            self.register(provisioner)

    def register(self, provisioner: Provisioner) -> None:
        if provisioner.kind in self._provisioners:
            raise ValueError(f"Provisioner already registered for kind: {provisioner.kind.value}")
        self._provisioners[provisioner.kind] = provisioner
        logger.debug("Registered %s for %s resources", type(provisioner).__name__, provisioner.kind.value)

    def get(self, kind: ResourceKind) -> Provisioner:
        try:
            return self._provisioners[kind]
        except KeyError as exc:
            raise ValueError(f"Unknown resource kind: {kind}") from exc

    def provision(self, resource_definition: ResourceDefinition) -> StatusResult:
        return self.get(resource_definition.kind).provision(resource_definition)

    def deprovision(self, provisioned_resource: ProvisionedResource) -> StatusResult:
        return self.get(provisioned_resource.kind).deprovision(provisioned_resource)
