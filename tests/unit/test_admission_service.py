import pytest
from fastapi.testclient import TestClient

from proxyguard.admission.admission_controller import AdmissionController
from proxyguard.config import AdmissionConfig, ServerConfig
from proxyguard.exceptions import ProxyGuardException
from proxyguard.services import admission
from proxyguard.server import WebServer
from proxyguard.services.admission import AdmissionWebhookServer
from proxyguard.validators.conflict import ConflictValidator
from tests.fixtures.k8s import StubStore, create_proxy, create_request


@pytest.fixture
def webhook_client(store):
    config = AdmissionConfig(ingress_classes="targetted,other-targetted")
    validator = ConflictValidator(store, config.ingress_classes)
    server = AdmissionWebhookServer(config, AdmissionController(validator))
    return TestClient(server.app)


def test_malformed_body_is_transport_error(webhook_client):
    response = webhook_client.post(
        "/validate", content=b"not a review", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.content == b""


def test_conflict_is_rejected_in_protocol(webhook_client):
    request = create_request(create_proxy("proxy-new", "foo.bar.com", "targetted"))

    response = webhook_client.post("/validate", json=request)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    body = response.json()
    assert body["response"]["uid"] == "test-uid-123"
    assert body["response"]["allowed"] is False
    assert body["response"]["status"]["code"] == 400
    assert body["response"]["status"]["message"] == "proxy-new is in conflict with [proxy1]"


def test_wrong_kind_is_rejected_in_protocol(webhook_client):
    request = create_request(
        {"metadata": {"name": "my-deployment"}},
        kind={"group": "apps", "version": "v1", "kind": "Deployment"},
        name="my-deployment",
    )

    response = webhook_client.post("/validate", json=request)

    assert response.status_code == 200
    status = response.json()["response"]["status"]
    assert status["code"] == 400
    assert status["reason"] == "BadRequest"


def test_allowed(webhook_client):
    request = create_request(create_proxy("proxy-new", "foo.bar2.com", "targetted"))

    response = webhook_client.post("/validate", json=request)

    assert response.status_code == 200
    assert response.json()["response"] == {"uid": "test-uid-123", "allowed": True}


def test_health(webhook_client):
    response = webhook_client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_build_server_wires_configuration(monkeypatch):
    store = StubStore()
    kubeconfigs = []

    def fake_from_cluster(kubeconfig=None):
        kubeconfigs.append(kubeconfig)
        return store

    monkeypatch.setattr(admission.ClusterStore, "from_cluster", staticmethod(fake_from_cluster))
    config = AdmissionConfig(ingress_classes="internal", ignore_own_revision=True)

    server = admission.build_server(config)

    validator = server.controller.validator
    assert kubeconfigs == [None]
    assert validator.store is store
    assert validator.matcher.target_classes == frozenset({"internal"})
    assert validator.ignore_own_revision is True


def test_unexpected_store_error_is_internal_error_verdict():
    store = StubStore(error=ConnectionError("socket closed"))
    config = AdmissionConfig(ingress_classes="targetted")
    server = AdmissionWebhookServer(config, AdmissionController(ConflictValidator(store, config.ingress_classes)))
    client = TestClient(server.app)
    request = create_request(create_proxy("proxy-new", "foo.bar.com", "targetted"))

    response = client.post("/validate", json=request)

    assert response.status_code == 200
    body = response.json()["response"]
    assert body["uid"] == "test-uid-123"
    assert body["allowed"] is False
    assert body["status"]["code"] == 500
    assert body["status"]["reason"] == "InternalError"
    assert body["status"]["message"] == "socket closed"


def test_run_refuses_tcp_without_tls(monkeypatch):
    def unexpected_build(config):
        pytest.fail("server must not be built without TLS")

    monkeypatch.setattr(admission, "build_server", unexpected_build)

    with pytest.raises(ProxyGuardException, match="TLS certificate and key are required"):
        admission.run(AdmissionConfig())


def test_run_refuses_tcp_with_only_a_certificate(monkeypatch, tmp_path):
    cert = tmp_path / "tls.crt"
    cert.write_text("cert")
    monkeypatch.setattr(admission, "build_server", lambda config: pytest.fail("server built"))

    with pytest.raises(ProxyGuardException):
        admission.run(AdmissionConfig(tls_cert_path=cert))


class FakeServer:
    def __init__(self):
        self.started = False

    def run(self):
        self.started = True


def test_run_serves_with_tls(monkeypatch, tmp_path):
    cert = tmp_path / "tls.crt"
    key = tmp_path / "tls.key"
    cert.write_text("cert")
    key.write_text("key")
    server = FakeServer()
    monkeypatch.setattr(admission, "build_server", lambda config: server)

    admission.run(AdmissionConfig(tls_cert_path=cert, tls_key_path=key))

    assert server.started


def test_run_serves_unix_socket_without_tls(monkeypatch, tmp_path):
    server = FakeServer()
    monkeypatch.setattr(admission, "build_server", lambda config: server)

    admission.run(AdmissionConfig(uds_path=str(tmp_path / "webhook.sock")))

    assert server.started


def test_web_server_requires_routes():
    with pytest.raises(TypeError):
        WebServer(ServerConfig())
