from typing import Optional

from loguru import logger

from proxyguard.admission.serializer import AdmissionSerializer
from proxyguard.exceptions import ProxyDecodeException
from proxyguard.models import (
    HTTPPROXY_GVK,
    AdmissionResponse,
    AdmissionReview,
    Status,
)
from proxyguard.validators.base import ValidatorBase


class AdmissionController:
    """Answers AdmissionReviews for HTTPProxy resources."""

    def __init__(self, validator: ValidatorBase, serializer: Optional[AdmissionSerializer] = None):
        self.validator = validator
        self.serializer = serializer or AdmissionSerializer()

    def review_bytes(self, data: bytes) -> bytes:
        """
        Decode an AdmissionReview, fill in its response and encode it again.

        Raises:
            MalformedEnvelopeException: If ``data`` is not an AdmissionReview.
        """
        admission_review = self.serializer.decode_review(data)
        return self.serializer.encode_review(self.review(admission_review))

    def review(self, admission_review: AdmissionReview) -> AdmissionReview:
        """Main admission validation logic"""
        admission_review.response = self._respond(admission_review)
        return admission_review

    def _respond(self, admission_review: AdmissionReview) -> AdmissionResponse:
        request = admission_review.request

        if request.kind != HTTPPROXY_GVK:
            logger.error(f"Review is not for HTTPProxy resource: kind={request.kind}, name={request.name}")
            return self._deny(
                request.uid,
                400,
                "BadRequest",
                f"Review is not for HTTPProxy resource. Instead got {request.kind} with name {request.name}",
            )

        try:
            proxy = self.serializer.decode_proxy(request.object)
        except ProxyDecodeException as e:
            logger.error(f"Failed to decode HTTPProxy: {e}")
            return self._deny(request.uid, 500, "InternalError", str(e))

        if proxy.metadata.namespace is None:
            proxy.metadata.namespace = request.namespace

        result, error = self.validator.validate(proxy)
        if error is not None:
            logger.error(f"Failed to validate HTTPProxy {proxy.name}: {error}")
            return self._deny(request.uid, 500, "InternalError", str(error))

        if not result.valid:
            logger.debug(f"Denied HTTPProxy {proxy.name}: {result.reason}")
            return self._deny(request.uid, 400, "BadRequest", result.reason)

        logger.debug(f"Allowed HTTPProxy {proxy.name}")
        return AdmissionResponse(uid=request.uid, allowed=True)

    @staticmethod
    def _deny(uid: str, code: int, reason: str, message: str) -> AdmissionResponse:
        return AdmissionResponse(
            uid=uid,
            allowed=False,
            status=Status(code=code, reason=reason, message=message),
        )
