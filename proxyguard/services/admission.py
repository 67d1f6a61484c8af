from typing import Optional

from fastapi import Request, Response, status
from loguru import logger
from starlette.concurrency import run_in_threadpool

from proxyguard.admission.admission_controller import AdmissionController
from proxyguard.admission.serializer import AdmissionSerializer
from proxyguard.config import AdmissionConfig
from proxyguard.exceptions import MalformedEnvelopeException, ProxyGuardException
from proxyguard.responses import HealthResponse
from proxyguard.server import WebServer, configure_logging
from proxyguard.store import ClusterStore
from proxyguard.validators.conflict import ConflictValidator

CONTENT_TYPE = "application/json"


class AdmissionWebhookServer(WebServer):
    """Validating webhook for HTTPProxy resources."""

    def __init__(self, config: AdmissionConfig, controller: AdmissionController):
        self.controller = controller
        super().__init__(config)

    def _setup_routes(self):
        """Setup web routes."""
        self.app.add_api_route("/validate", self.validate, methods=["POST"])
        self.app.add_api_route("/healthz", self.health, methods=["GET"], response_model=HealthResponse)

    async def validate(self, request: Request) -> Response:
        body = await request.body()
        try:
            # The cluster store client blocks, keep it off the event loop.
            payload = await run_in_threadpool(self.controller.review_bytes, body)
        except MalformedEnvelopeException as e:
            logger.error(f"Could not decode request body: {e}")
            return Response(status_code=status.HTTP_400_BAD_REQUEST)

        return Response(content=payload, media_type=CONTENT_TYPE)

    async def health(self) -> HealthResponse:
        return HealthResponse()


def build_server(config: AdmissionConfig) -> AdmissionWebhookServer:
    """Wire the cluster store, validator and controller into a server."""
    store = ClusterStore.from_cluster(config.kubeconfig)
    validator = ConflictValidator(
        store,
        target_classes=config.ingress_classes,
        ignore_own_revision=config.ignore_own_revision,
    )
    controller = AdmissionController(validator, AdmissionSerializer())
    return AdmissionWebhookServer(config, controller)


def run(config: Optional[AdmissionConfig] = None):
    """Main entry point."""
    try:
        # Load configuration using Pydantic
        if config is None:
            config = AdmissionConfig()

        configure_logging(config.debug)
        logger.debug(f"Configuration: {config.export_json()}")

        if config.ingress_classes:
            logger.info(f"Validating HTTPProxies for ingress classes {config.ingress_classes}")
        else:
            logger.info("No ingress classes configured, validating the default ingress class")

        # The API server only calls webhooks over HTTPS
        if not config.uds_path and (not config.tls_cert_path or not config.tls_key_path):
            raise ProxyGuardException("TLS certificate and key are required when serving on TCP")

        server = build_server(config)
        server.run()

    except Exception as e:
        logger.exception(f"Failed to start admission webhook: {e}")
        raise


if __name__ == "__main__":
    run()
