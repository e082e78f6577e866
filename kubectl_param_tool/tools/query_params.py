"""Query parameter support tools.

Lets an agent ask, before it builds a request, whether the API server will
honor a query parameter such as ``fieldValidation`` or ``dryRun`` for a given
resource type. The answer comes from the server's OpenAPI v3 documents, read
from a directory of downloaded documents (one file per group-version, as
served under ``/openapi/v3``).

Tools:
    check_query_param_support - Does a GVK support a verifiable query param
    list_openapi_group_versions - Group-versions described by the documents
"""

import logging
import threading
from typing import Any, Dict, List, Tuple

from mcp.types import ToolAnnotations

from kubectl_param_tool import config
from kubectl_param_tool.k8s_config import get_apiextensions_client
from kubectl_param_tool.openapi3 import EmbeddedFileClient, Root
from kubectl_param_tool.resource.crd_finder import (
    crds_from_apiextensions,
    crds_from_list,
)
from kubectl_param_tool.resource.query_param import (
    VerifiableQueryParam,
    VerifierError,
    is_verifiable,
)
from kubectl_param_tool.resource.schema import GroupVersionKind
from kubectl_param_tool.resource.verifier import (
    QueryParamVerifierV3,
    new_query_param_verifier_v3,
)

logger = logging.getLogger("mcp-server")


def _missing_openapi_dir() -> Dict[str, Any]:
    return {
        "success": False,
        "error": "No OpenAPI v3 document directory configured",
        "hint": f"Pass openapi_dir or set {config.OPENAPI_DIR_ENV}",
    }


def register_query_param_tools(server, non_destructive: bool):
    """Register OpenAPI v3 query parameter support tools.

    Verifiers live as long as the server, so each one lists the cluster's
    CRDs at most once and parses each OpenAPI document at most once.
    """

    verifiers: Dict[Tuple[str, str, bool, str], QueryParamVerifierV3] = {}
    verifiers_lock = threading.Lock()

    def get_verifier(
        directory: str, query_param: str, skip: bool, context: str
    ) -> QueryParamVerifierV3:
        key = (directory, query_param, skip, context)
        with verifiers_lock:
            verifier = verifiers.get(key)
            if verifier is None:
                root = Root(EmbeddedFileClient(directory))
                if skip:
                    crd_getter = crds_from_list([])
                else:
                    crd_getter = crds_from_apiextensions(get_apiextensions_client(context))
                verifier = new_query_param_verifier_v3(crd_getter, root, query_param)
                verifiers[key] = verifier
                logger.debug(f"Created query param verifier for {key}")
            return verifier

    @server.tool(
        annotations=ToolAnnotations(
            title="Check Query Param Support",
            readOnlyHint=True,
        ),
    )
    def check_query_param_support(
        group: str,
        version: str,
        kind: str,
        query_param: str = VerifiableQueryParam.FIELD_VALIDATION.value,
        openapi_dir: str = "",
        skip_crds: bool = False,
        context: str = ""
    ) -> Dict[str, Any]:
        """Check whether the API server supports a query parameter for a resource type.

        Custom resources are recognized by listing the cluster's CRDs, and
        share the CustomResourceDefinition endpoint's schema. Collection
        "List" kinds and unrecognized parameters are never supported.

        Example: can `kubectl apply` send fieldValidation=Strict for Jobs?
          check_query_param_support(group="batch", version="v1", kind="Job")

        Args:
            group: API group ("" for the core group)
            version: API version (e.g., "v1")
            kind: Resource kind (e.g., "Job", "Namespace")
            query_param: "fieldValidation" or "dryRun"
            openapi_dir: Directory of OpenAPI v3 documents (defaults to KUBECTL_PARAM_OPENAPI_DIR)
            skip_crds: Do not list CRDs from the cluster
            context: Kubernetes context (uses current if not specified)
        """
        try:
            directory = config.get_openapi_dir(openapi_dir)
            if not directory:
                return _missing_openapi_dir()

            verifier = get_verifier(
                directory, query_param, skip_crds or config.skip_crds(), context
            )
            gvk = GroupVersionKind(group=group, version=version, kind=kind)

            result: Dict[str, Any] = {
                "success": True,
                "context": context or "current",
                "gvk": {"group": group, "version": version, "kind": kind},
                "queryParam": query_param,
                "recognized": is_verifiable(query_param),
            }
            try:
                verifier.has_support(gvk)
            except VerifierError as e:
                result["supported"] = False
                result["reason"] = str(e)
                return result

            result["supported"] = True
            return result
        except Exception as e:
            logger.error(f"Error checking query param support: {e}")
            return {"success": False, "error": str(e)}

    @server.tool(
        annotations=ToolAnnotations(
            title="List OpenAPI v3 Group Versions",
            readOnlyHint=True,
        ),
    )
    def list_openapi_group_versions(
        openapi_dir: str = ""
    ) -> Dict[str, Any]:
        """List the group-versions described by the OpenAPI v3 documents.

        Args:
            openapi_dir: Directory of OpenAPI v3 documents (defaults to KUBECTL_PARAM_OPENAPI_DIR)
        """
        try:
            directory = config.get_openapi_dir(openapi_dir)
            if not directory:
                return _missing_openapi_dir()

            group_versions: List[str] = sorted(Root(EmbeddedFileClient(directory)).paths())
            return {
                "success": True,
                "directory": directory,
                "count": len(group_versions),
                "groupVersions": group_versions,
            }
        except Exception as e:
            logger.error(f"Error listing OpenAPI group versions: {e}")
            return {"success": False, "error": str(e)}
