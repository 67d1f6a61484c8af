from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from proxyguard.exceptions import ProxyGuardException
from proxyguard.models import HTTPProxy


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: str = ""

    @classmethod
    def allow(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def deny(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)


class ValidatorBase(ABC):
    """Decides whether an HTTPProxy may be admitted."""

    @abstractmethod
    def validate(self, proxy: HTTPProxy) -> Tuple[ValidationResult, Optional[ProxyGuardException]]:
        """
        Validate a candidate proxy.

        Returns the verdict, and the collaborator error when the verdict could
        not be reached normally. A rejection is not an error.
        """
        raise NotImplementedError()
