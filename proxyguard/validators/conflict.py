from typing import Iterable, List, Optional, Tuple

from loguru import logger

from proxyguard.exceptions import StoreException
from proxyguard.models import HTTPProxy
from proxyguard.store import Store
from proxyguard.validators.base import ValidationResult, ValidatorBase
from proxyguard.validators.ingress_class import IngressClassMatcher

LIST_FAILURE_REASON = "could not list resources in cluster"


class ConflictValidator(ValidatorBase):
    """Rejects proxies whose FQDN is already claimed within a targeted ingress class."""

    def __init__(
        self,
        store: Store,
        target_classes: Iterable[str] = (),
        ignore_own_revision: bool = False,
    ):
        self.store = store
        self.matcher = IngressClassMatcher(target_classes)
        self.ignore_own_revision = ignore_own_revision

    def validate(self, proxy: HTTPProxy) -> Tuple[ValidationResult, Optional[StoreException]]:
        if not self.matcher.matches(proxy):
            logger.debug(f"HTTPProxy {proxy.name} is not targeted by this gate, skipping")
            return ValidationResult.allow(), None

        try:
            proxies = self.store.list_http_proxies()
        except StoreException as e:
            return ValidationResult.deny(LIST_FAILURE_REASON), e
        except Exception as e:
            error = StoreException(str(e))
            error.__cause__ = e
            return ValidationResult.deny(LIST_FAILURE_REASON), error

        conflicts = self.find_conflicts(proxy, proxies)
        if conflicts:
            logger.info(f"HTTPProxy {proxy.name} conflicts on {proxy.fqdn} with {conflicts}")
            return ValidationResult.deny(
                f"{proxy.name} is in conflict with [{' '.join(conflicts)}]"
            ), None

        return ValidationResult.allow(), None

    def find_conflicts(self, proxy: HTTPProxy, proxies: List[HTTPProxy]) -> List[str]:
        """Names of targeted proxies claiming the same FQDN, in store order."""
        conflicts = []
        # TODO: follow include chains so delegated (non-root) proxies are compared too.
        for existing in proxies:
            if self.ignore_own_revision and self._same_object(proxy, existing):
                continue
            if existing.fqdn is None or existing.fqdn != proxy.fqdn:
                continue
            if self.matcher.matches(existing):
                conflicts.append(existing.name)
        return conflicts

    @staticmethod
    def _same_object(proxy: HTTPProxy, existing: HTTPProxy) -> bool:
        return existing.name == proxy.name and existing.namespace == proxy.namespace
