"""Decide whether the server's OpenAPI v3 schema supports a query parameter.

Support is read from the PATCH operation of the resource's item path: that is
where the server declares write-time parameters such as ``fieldValidation``
and ``dryRun``. Every "no" is raised as a VerifierError subclass (or the CRD
getter's own error), so callers can treat "raised" as "unsupported" while
still logging the cause.
"""

import logging
from typing import Any, Dict, List, Optional

from kubectl_param_tool.openapi3 import Root
from kubectl_param_tool.resource.crd_finder import (
    CRDFinder,
    CRDGetter,
    has_custom_resource_definition,
)
from kubectl_param_tool.resource.paths import (
    CUSTOM_RESOURCE_DEFINITION_GVK,
    gvk_path_keys,
)
from kubectl_param_tool.resource.query_param import (
    ParamUnsupportedError,
    QueryParamDryRun,
    SchemaError,
    VerifiableQueryParam,
    is_verifiable,
    param_name,
)
from kubectl_param_tool.resource.schema import GroupVersionKind

logger = logging.getLogger(__name__)

# Pseudo-kind for client-side collections; never described by the schema.
LIST_KIND = "List"

NAMESPACE_GVK = GroupVersionKind(group="", version="v1", kind="Namespace")

GVK_EXTENSION = "x-kubernetes-group-version-kind"
PARAMETER_REF_PREFIX = "#/components/parameters/"
VERIFIED_OPERATION = "patch"


class QueryParamVerifierV3:
    """Checks one query parameter against an OpenAPI v3 root.

    Holds no verification state; one instance can serve any number of
    ``has_support`` calls, from any number of threads.
    """

    def __init__(self, finder: CRDFinder, root: Root, query_param: Any):
        self.finder = finder
        self.root = root
        self.query_param = query_param

    def has_support(self, gvk: GroupVersionKind) -> None:
        """Return if ``gvk`` supports the query parameter, raise otherwise.

        Raises:
            ParamUnsupportedError: the parameter or resource is not supported.
            SchemaError: the schema could not be traversed.
            Exception: whatever the CRD getter raised.
        """
        if not is_verifiable(self.query_param):
            raise ParamUnsupportedError(gvk, self.query_param)
        query_param = VerifiableQueryParam(self.query_param)

        if gvk.kind == LIST_KIND:
            raise ParamUnsupportedError(gvk, query_param)

        # Namespace has always accepted dryRun, whatever its schema says.
        if query_param == QueryParamDryRun and gvk == NAMESPACE_GVK:
            return

        is_crd = has_custom_resource_definition(self.finder, gvk)
        target = CUSTOM_RESOURCE_DEFINITION_GVK if is_crd else gvk
        doc = self.root.gv_spec(target.group_version())

        supports_query_param_v3(
            doc,
            target,
            gvk_path_keys(gvk, is_crd),
            query_param,
            requested=gvk,
        )


def new_query_param_verifier_v3(
    crd_getter: CRDGetter, root: Root, query_param: Any
) -> QueryParamVerifierV3:
    return QueryParamVerifierV3(CRDFinder(crd_getter), root, query_param)


def supports(verifier: QueryParamVerifierV3, gvk: GroupVersionKind) -> bool:
    """Collapse ``has_support`` into a boolean, logging why support is missing."""
    try:
        verifier.has_support(gvk)
    except Exception as e:
        logger.debug(f"Query param {param_name(verifier.query_param)} unsupported for {gvk}: {e}")
        return False
    return True


def supports_query_param_v3(
    doc: Dict[str, Any],
    gvk: GroupVersionKind,
    path_keys: List[str],
    query_param: VerifiableQueryParam,
    requested: Optional[GroupVersionKind] = None,
) -> None:
    """Look for ``query_param`` on the PATCH operation of ``gvk`` in ``doc``.

    Args:
        doc: parsed OpenAPI v3 document of gvk's group-version
        gvk: the resource whose operation is inspected
        path_keys: candidate paths for gvk, tried in order
        query_param: the parameter to look for
        requested: the GVK the caller asked about, used in error messages
    """
    requested = requested or gvk
    paths = doc.get("paths")
    if not isinstance(paths, dict):
        raise SchemaError("Invalid OpenAPI V3 document: missing paths")

    path_item = _find_path_item(paths, gvk, path_keys)
    if path_item is None:
        logger.debug(f"Path not found for GVK ({gvk}) in OpenAPI V3 doc")
        raise ParamUnsupportedError(requested, query_param)

    operation = path_item.get(VERIFIED_OPERATION)
    if not isinstance(operation, dict):
        raise SchemaError(f"PATCH operation not found for GVK ({gvk})")

    # A match anywhere wins; malformed entries only matter when nothing matched.
    malformed: Optional[SchemaError] = None
    for param in _declared_parameters(path_item, operation):
        try:
            resolved = _resolve_parameter(doc, param)
        except SchemaError as e:
            malformed = malformed or e
            continue
        if resolved is None:
            continue
        if resolved.get("in") == "query" and resolved.get("name") == query_param.value:
            return

    if malformed is not None:
        raise malformed
    raise ParamUnsupportedError(requested, query_param)


def _find_path_item(
    paths: Dict[str, Any], gvk: GroupVersionKind, path_keys: List[str]
) -> Optional[Dict[str, Any]]:
    for key in path_keys:
        item = paths.get(key)
        if item is None:
            continue
        if not isinstance(item, dict):
            raise SchemaError(f"Invalid path item for {key}")
        operation = item.get(VERIFIED_OPERATION)
        if not isinstance(operation, dict) or GVK_EXTENSION not in operation:
            return item
        if _has_gvk_extension(operation, gvk):
            return item

    # The kind's plural could not be guessed; find the path by its GVK tag.
    for item in paths.values():
        if not isinstance(item, dict):
            continue
        operation = item.get(VERIFIED_OPERATION)
        if isinstance(operation, dict) and _has_gvk_extension(operation, gvk):
            return item
    return None


def _has_gvk_extension(operation: Dict[str, Any], gvk: GroupVersionKind) -> bool:
    value = operation.get(GVK_EXTENSION)
    if isinstance(value, dict):
        candidates = [value]
    elif isinstance(value, list):
        candidates = value
    else:
        return False

    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        found = GroupVersionKind(
            group=candidate.get("group", ""),
            version=candidate.get("version", ""),
            kind=candidate.get("kind", ""),
        )
        if found == gvk:
            return True
    return False


def _declared_parameters(
    path_item: Dict[str, Any], operation: Dict[str, Any]
) -> List[Any]:
    # Parameters shared by every operation on the path apply to PATCH too.
    declared = []
    for owner in (path_item, operation):
        params = owner.get("parameters")
        if params is None:
            continue
        if not isinstance(params, list):
            raise SchemaError("Invalid OpenAPI V3 document: parameters is not a list")
        declared.extend(params)
    return declared


def _resolve_parameter(doc: Dict[str, Any], param: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(param, dict):
        raise SchemaError(f"Invalid parameter entry: {param!r}")

    ref = param.get("$ref")
    if not ref:
        return param
    if not isinstance(ref, str) or not ref.startswith(PARAMETER_REF_PREFIX):
        logger.debug(f"Ignoring parameter reference {ref!r}")
        return None

    name = ref[len(PARAMETER_REF_PREFIX):]
    components = doc.get("components") or {}
    parameters = components.get("parameters") if isinstance(components, dict) else None
    resolved = parameters.get(name) if isinstance(parameters, dict) else None
    if not isinstance(resolved, dict):
        raise SchemaError(f"Unresolvable parameter reference {ref}")
    return resolved

