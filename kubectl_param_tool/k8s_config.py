"""Kubernetes API client construction."""

import logging

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

logger = logging.getLogger(__name__)


def get_api_client(context: str = "") -> client.ApiClient:
    """Build an ApiClient for ``context``, or for the ambient configuration.

    Inside a pod with no explicit context the service account is used;
    otherwise the kubeconfig is loaded.
    """
    if not context:
        try:
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
            return client.ApiClient()
        except ConfigException:
            pass

    api_client = config.new_client_from_config(context=context or None)
    logger.info(f"Loaded kubeconfig (context: {context or 'current'})")
    return api_client


def get_apiextensions_client(context: str = "") -> client.ApiextensionsV1Api:
    return client.ApiextensionsV1Api(get_api_client(context))
