class ProxyGuardException(Exception):
    """Base exception for the HTTPProxy admission gate."""


class MalformedEnvelopeException(ProxyGuardException):
    """The request body is not a readable AdmissionReview."""


class ProxyDecodeException(ProxyGuardException):
    """The object embedded in an AdmissionReview is not a readable HTTPProxy."""


class StoreException(ProxyGuardException):
    """HTTPProxy resources could not be listed from the cluster."""
