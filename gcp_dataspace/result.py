"""Result objects returned by the vault and the provisioners."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class ResponseStatus(str, Enum):
    OK = "ok"
    ERROR_RETRY = "error_retry"
    FATAL_ERROR = "fatal_error"


@dataclass
class Result:
    """Outcome of an operation: either content or a list of failure messages."""

    succeeded: bool
    content: Any = None
    failure_messages: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, content: Any = None) -> "Result":
        return cls(succeeded=True, content=content)

    @classmethod
    def failure(cls, *messages: str) -> "Result":
        return cls(succeeded=False, failure_messages=list(messages))

    @property
    def failed(self) -> bool:
        return not self.succeeded

    @property
    def failure_detail(self) -> Optional[str]:
        if self.succeeded:
            return None
        return ", ".join(self.failure_messages)


@dataclass
class StatusResult(Result):
    status: ResponseStatus = ResponseStatus.OK

    @classmethod
    def success(cls, content: Any = None) -> "StatusResult":
        return cls(succeeded=True, content=content, status=ResponseStatus.OK)

    @classmethod
    def failure(cls, status: ResponseStatus, *messages: str) -> "StatusResult":  # type: ignore[override]
        return cls(succeeded=False, failure_messages=list(messages), status=status)
