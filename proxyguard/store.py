"""
Access to the HTTPProxy resources currently stored in the cluster.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from loguru import logger
from pydantic import ValidationError

from proxyguard.exceptions import StoreException
from proxyguard.models import HTTPPROXY_GVK, HTTPProxy

HTTPPROXY_PLURAL = "httpproxies"


class Store(ABC):
    """Read-only source of the HTTPProxy objects admitted so far."""

    @abstractmethod
    def list_http_proxies(self) -> List[HTTPProxy]:
        """
        List every HTTPProxy in the cluster.

        Raises:
            StoreException: If the list could not be produced.
        """
        raise NotImplementedError()


class ClusterStore(Store):
    """Store backed by the Kubernetes API server."""

    def __init__(self, api_client: Optional[client.ApiClient] = None):
        self.custom_api = client.CustomObjectsApi(api_client)

    @classmethod
    def from_cluster(cls, kubeconfig: Optional[Path] = None) -> "ClusterStore":
        """
        Build a store from the in-cluster service account.

        Falls back to a kubeconfig file when not running in a pod, or uses
        ``kubeconfig`` directly when given.
        """
        if kubeconfig is not None:
            config.load_kube_config(config_file=str(kubeconfig))
            logger.debug(f"Loaded kubeconfig from {kubeconfig}")
        else:
            try:
                config.load_incluster_config()
                logger.debug("Loaded in-cluster Kubernetes configuration")
            except config.ConfigException:
                config.load_kube_config()
                logger.debug("Loaded kubeconfig from local environment")
        return cls(client.ApiClient())

    def list_http_proxies(self) -> List[HTTPProxy]:
        try:
            response = self.custom_api.list_cluster_custom_object(
                group=HTTPPROXY_GVK.group,
                version=HTTPPROXY_GVK.version,
                plural=HTTPPROXY_PLURAL,
            )
        except ApiException as e:
            raise StoreException(f"Failed to list HTTPProxies: {e.status} {e.reason}") from e
        except Exception as e:
            raise StoreException(f"Failed to list HTTPProxies: {e}") from e

        try:
            return [HTTPProxy.model_validate(item) for item in response.get("items", [])]
        except ValidationError as e:
            raise StoreException(f"Cluster returned an unreadable HTTPProxy: {e}") from e
