"""Domain models shared by the Google Cloud extensions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# namespace prefix the connector puts in front of data address property keys
EDC_NAMESPACE = "https://w3id.org/edc/v0.0.1/ns/"
KEY_NAME = "keyName"


class GcpException(RuntimeError):
    """Raised when a Google Cloud call cannot be completed."""


@dataclass(frozen=True)
class GcpServiceAccount:
    email: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class GcpAccessToken:
    token: str = field(repr=False)
    expiration: int  # epoch milliseconds


@dataclass(frozen=True)
class GcsBucket:
    name: str


@dataclass
class DataAddress:
    """Typed bag of properties describing where data lives."""

    type: str
    properties: Dict[str, Any] = field(default_factory=dict)

    def get_property(self, key: str, default: Any = None) -> Any:
        if EDC_NAMESPACE + key in self.properties:
            return self.properties[EDC_NAMESPACE + key]
        return self.properties.get(key, default)

    def get_string_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get_property(key)
        if value is None:
            return default
        return str(value)

    def has_property(self, key: str) -> bool:
        return EDC_NAMESPACE + key in self.properties or key in self.properties

    @property
    def key_name(self) -> Optional[str]:
        return self.get_string_property(KEY_NAME)


@dataclass
class DataFlowStartMessage:
    process_id: str
    source_data_address: DataAddress
    destination_data_address: DataAddress
