"""
Pydantic models for the Kubernetes objects handled by the admission gate.

Only the fields the gate reads are modelled; everything else in the
incoming JSON is ignored.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class KubeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GroupVersionKind(KubeModel):
    group: str = ""
    version: str = ""
    kind: str = ""

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


HTTPPROXY_GVK = GroupVersionKind(group="projectcontour.io", version="v1", kind="HTTPProxy")


class ObjectMeta(KubeModel):
    name: str = ""
    namespace: Optional[str] = None
    annotations: Dict[str, str] = Field(default_factory=dict)

    @field_validator("annotations", mode="before")
    @classmethod
    def null_annotations(cls, v):
        """The API server serializes empty maps as null."""
        return {} if v is None else v


class VirtualHost(KubeModel):
    fqdn: str


class HTTPProxySpec(KubeModel):
    virtualhost: Optional[VirtualHost] = None
    ingress_class_name: str = Field(default="", alias="ingressClassName")


class HTTPProxy(KubeModel):
    """A projectcontour.io/v1 HTTPProxy."""

    api_version: Optional[Literal["projectcontour.io/v1"]] = Field(default=None, alias="apiVersion")
    kind: Optional[Literal["HTTPProxy"]] = None
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: HTTPProxySpec = Field(default_factory=HTTPProxySpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.namespace

    @property
    def annotations(self) -> Dict[str, str]:
        return self.metadata.annotations

    @property
    def ingress_class_name(self) -> str:
        return self.spec.ingress_class_name

    @property
    def fqdn(self) -> Optional[str]:
        """Virtual host FQDN, or None for a non-root proxy."""
        if self.spec.virtualhost is None:
            return None
        return self.spec.virtualhost.fqdn


class Status(KubeModel):
    status: Literal["Failure"] = "Failure"
    code: int
    reason: Literal["BadRequest", "InternalError"]
    message: str


class AdmissionRequest(KubeModel):
    uid: str
    kind: GroupVersionKind
    resource: Optional[Dict[str, str]] = None
    name: str = ""
    namespace: Optional[str] = None
    operation: Optional[str] = None
    # Decoded separately so that an unreadable object yields a verdict
    # instead of failing the whole envelope.
    object: Any = None


class AdmissionResponse(KubeModel):
    uid: str
    allowed: bool
    status: Optional[Status] = None


class AdmissionReview(KubeModel):
    api_version: Literal["admission.k8s.io/v1"] = Field(alias="apiVersion")
    kind: Literal["AdmissionReview"]
    request: AdmissionRequest
    response: Optional[AdmissionResponse] = None
