"""Resolution of the ingress class an HTTPProxy is processed under."""

from typing import Iterable

from proxyguard.models import HTTPProxy

DEFAULT_INGRESS_CLASS = "contour"
INGRESS_CLASS_ANNOTATION = "kubernetes.io/ingress.class"


def effective_class(proxy: HTTPProxy) -> str:
    """
    Return the ingress class of a proxy.

    A non-empty legacy ``kubernetes.io/ingress.class`` annotation takes
    precedence over ``spec.ingressClassName``.
    """
    annotation_class = proxy.annotations.get(INGRESS_CLASS_ANNOTATION, "")
    if annotation_class:
        return annotation_class
    return proxy.ingress_class_name


class IngressClassMatcher:
    """Tells whether a proxy belongs to the ingress classes this gate serves."""

    def __init__(self, target_classes: Iterable[str] = ()):
        self.target_classes = frozenset(target_classes)

    def is_targeted(self, class_name: str) -> bool:
        # With nothing configured, contour processes unclassed proxies and
        # the default class.
        if not self.target_classes:
            return class_name in ("", DEFAULT_INGRESS_CLASS)
        return class_name in self.target_classes

    def matches(self, proxy: HTTPProxy) -> bool:
        return self.is_targeted(effective_class(proxy))
