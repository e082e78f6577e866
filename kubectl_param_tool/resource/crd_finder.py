"""Lazily enumerate the custom resources known to the client.

Listing CustomResourceDefinitions costs a round trip to the cluster and the
result rarely changes within one command, so a CRDFinder fetches once and
reuses the answer for the rest of its lifetime.
"""

import logging
import threading
from typing import Any, Callable, Iterable, List, Optional

from kubectl_param_tool.resource.schema import GroupKind, GroupVersionKind

logger = logging.getLogger(__name__)

CRDGetter = Callable[[], List[GroupKind]]


class CRDFinder:
    """Memoizes the first successful result of ``getter``.

    The lock is held across the fetch: callers that arrive while the first
    retrieval is running block and then share its result. A failed retrieval
    leaves the cache empty, so the next caller tries again.
    """

    def __init__(self, getter: CRDGetter):
        self._getter = getter
        self._lock = threading.Lock()
        self._cache: Optional[List[GroupKind]] = None

    def find_resources(self) -> List[GroupKind]:
        with self._lock:
            if self._cache is None:
                crds = list(self._getter())
                logger.debug(f"Cached {len(crds)} custom resource kinds")
                self._cache = crds
            return list(self._cache)

    def has_crd(self, group_kind: GroupKind) -> bool:
        return group_kind in self.find_resources()


def has_custom_resource_definition(finder: CRDFinder, gvk: GroupVersionKind) -> bool:
    """Return True if the group and kind of ``gvk`` belong to a known CRD."""
    return finder.has_crd(gvk.group_kind())


def crds_from_list(group_kinds: Iterable[GroupKind]) -> CRDGetter:
    """Getter over a set the caller already holds."""
    items = list(group_kinds)

    def getter() -> List[GroupKind]:
        return list(items)

    return getter


def crds_from_apiextensions(api: Any) -> CRDGetter:
    """Getter that lists CustomResourceDefinitions through ``ApiextensionsV1Api``.

    Args:
        api: a ``kubernetes.client.ApiextensionsV1Api`` (or anything with a
            compatible ``list_custom_resource_definition``)
    """

    def getter() -> List[GroupKind]:
        crd_list = api.list_custom_resource_definition()
        result: List[GroupKind] = []
        for crd in crd_list.items or []:
            spec = crd.spec
            if spec is None or spec.names is None:
                name = crd.metadata.name if crd.metadata is not None else "<unnamed>"
                logger.warning(f"Skipping CRD {name} without spec.names")
                continue
            result.append(GroupKind(group=spec.group, kind=spec.names.kind))
        return result

    return getter
