"""Map a GroupVersionKind to the REST paths the API server routes it under.

The resource segment is derived from the kind with the same guess the API
server's REST mapper uses when no discovery information is available. It is
not English pluralization: ``Gateway`` becomes ``gatewaies``, exactly as the
server would guess it. Resources registered under any other plural are found
by the verifier's extension scan instead.
"""

from typing import List, Tuple

from kubectl_param_tool.resource.schema import GroupVersion, GroupVersionKind

# Kinds ending in these suffixes are registered under their singular name.
UNPLURALIZED_SUFFIXES = ("endpoints",)

CUSTOM_RESOURCE_DEFINITION_GVK = GroupVersionKind(
    group="apiextensions.k8s.io",
    version="v1",
    kind="CustomResourceDefinition",
)


def guess_kind_to_resource(kind: str) -> Tuple[str, str]:
    """Return the (plural, singular) resource names for a kind."""
    if not kind:
        return "", ""

    singular = kind.lower()
    if singular.endswith(UNPLURALIZED_SUFFIXES):
        return singular, singular

    if singular.endswith("s"):
        return singular + "es", singular
    if singular.endswith("y"):
        return singular[:-1] + "ies", singular
    return singular + "s", singular


def api_prefix(gv: GroupVersion) -> str:
    # The legacy core group lives under /api, every named group under /apis.
    if not gv.group:
        return f"/api/{gv.version}"
    return f"/apis/{gv.group}/{gv.version}"


def gvk_path_keys(gvk: GroupVersionKind, is_crd: bool = False) -> List[str]:
    """Candidate item paths for ``gvk``, namespaced before cluster-scoped.

    Custom resources all share the CustomResourceDefinition endpoint, so
    ``is_crd`` ignores the kind entirely.
    """
    if is_crd:
        gvk = CUSTOM_RESOURCE_DEFINITION_GVK

    plural, _ = guess_kind_to_resource(gvk.kind)
    if not plural:
        return []

    prefix = api_prefix(gvk.group_version())
    return [
        f"{prefix}/namespaces/{{namespace}}/{plural}/{{name}}",
        f"{prefix}/{plural}/{{name}}",
    ]
