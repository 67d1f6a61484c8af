from typing import Any

import orjson
from pydantic import ValidationError

from proxyguard.exceptions import MalformedEnvelopeException, ProxyDecodeException
from proxyguard.models import AdmissionReview, HTTPProxy


class AdmissionSerializer:
    """JSON codec for AdmissionReview envelopes and the HTTPProxy they carry."""

    def __init__(self, pretty: bool = True):
        self.dump_options = orjson.OPT_INDENT_2 if pretty else 0

    def decode_review(self, data: bytes) -> AdmissionReview:
        try:
            return AdmissionReview.model_validate_json(data)
        except ValidationError as e:
            raise MalformedEnvelopeException(f"Could not decode AdmissionReview: {e}") from e

    def encode_review(self, review: AdmissionReview) -> bytes:
        return orjson.dumps(
            review.model_dump(mode="json", by_alias=True, exclude_none=True),
            option=self.dump_options,
        )

    def decode_proxy(self, raw: Any) -> HTTPProxy:
        """
        Decode the object embedded in an admission request.

        ``raw`` is the already parsed JSON value, or raw JSON text.
        """
        if raw is None:
            raise ProxyDecodeException("Admission request carries no object")
        try:
            if isinstance(raw, (bytes, bytearray, str)):
                return HTTPProxy.model_validate_json(raw)
            return HTTPProxy.model_validate(raw)
        except ValidationError as e:
            raise ProxyDecodeException(f"Could not decode HTTPProxy: {e}") from e
