"""Unit tests for the memoizing CRD finder."""

import threading
import time

import pytest
from unittest.mock import MagicMock

from kubectl_param_tool.resource.crd_finder import (
    CRDFinder,
    crds_from_apiextensions,
    crds_from_list,
    has_custom_resource_definition,
)
from kubectl_param_tool.resource.schema import GroupKind, GroupVersionKind

EXAMPLE_CRD = GroupKind(group="example.com", kind="ExampleCRD")


def _make_mock_crd(name, group, kind):
    crd = MagicMock()
    crd.metadata.name = name
    crd.spec.group = group
    crd.spec.names.kind = kind
    return crd


class TestCRDFinder:

    @pytest.mark.unit
    def test_result_is_memoized(self):
        getter = MagicMock(return_value=[EXAMPLE_CRD])
        finder = CRDFinder(getter)

        assert finder.find_resources() == [EXAMPLE_CRD]
        assert finder.find_resources() == [EXAMPLE_CRD]
        getter.assert_called_once()

    @pytest.mark.unit
    def test_failure_is_not_cached(self):
        getter = MagicMock(side_effect=[RuntimeError("connection refused"), [EXAMPLE_CRD]])
        finder = CRDFinder(getter)

        with pytest.raises(RuntimeError, match="connection refused"):
            finder.find_resources()
        assert finder.find_resources() == [EXAMPLE_CRD]
        assert finder.find_resources() == [EXAMPLE_CRD]
        assert getter.call_count == 2

    @pytest.mark.unit
    def test_empty_result_is_cached(self):
        getter = MagicMock(return_value=[])
        finder = CRDFinder(getter)

        assert finder.find_resources() == []
        assert finder.find_resources() == []
        getter.assert_called_once()

    @pytest.mark.unit
    def test_callers_cannot_mutate_cache(self):
        finder = CRDFinder(crds_from_list([EXAMPLE_CRD]))
        finder.find_resources().clear()
        assert finder.find_resources() == [EXAMPLE_CRD]

    @pytest.mark.unit
    def test_concurrent_first_calls_fetch_once(self):
        calls = []
        started = threading.Event()

        def slow_getter():
            calls.append(1)
            started.set()
            time.sleep(0.05)
            return [EXAMPLE_CRD]

        finder = CRDFinder(slow_getter)
        results = []

        def worker():
            results.append(finder.find_resources())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert started.is_set()
        assert len(calls) == 1
        assert results == [[EXAMPLE_CRD]] * 8

    @pytest.mark.unit
    def test_has_crd(self):
        finder = CRDFinder(crds_from_list([EXAMPLE_CRD]))
        assert finder.has_crd(EXAMPLE_CRD)
        assert not finder.has_crd(GroupKind("example.com", "Other"))


class TestHasCustomResourceDefinition:

    @pytest.mark.unit
    def test_version_is_ignored(self):
        finder = CRDFinder(crds_from_list([EXAMPLE_CRD]))
        for version in ("v1", "v1beta1", "v2"):
            gvk = GroupVersionKind("example.com", version, "ExampleCRD")
            assert has_custom_resource_definition(finder, gvk)

    @pytest.mark.unit
    def test_group_must_match(self):
        finder = CRDFinder(crds_from_list([EXAMPLE_CRD]))
        gvk = GroupVersionKind("different.com", "v1", "ExampleCRD")
        assert not has_custom_resource_definition(finder, gvk)

    @pytest.mark.unit
    def test_getter_error_propagates(self):
        finder = CRDFinder(MagicMock(side_effect=RuntimeError("forbidden")))
        with pytest.raises(RuntimeError, match="forbidden"):
            has_custom_resource_definition(
                finder, GroupVersionKind("example.com", "v1", "ExampleCRD")
            )


class TestCRDsFromApiextensions:

    @pytest.mark.unit
    def test_lists_group_kinds(self):
        mock_api = MagicMock()
        mock_api.list_custom_resource_definition.return_value = MagicMock(
            items=[
                _make_mock_crd(
                    "clusters.postgresql.cnpg.io", "postgresql.cnpg.io", "Cluster"
                ),
                _make_mock_crd(
                    "kafkas.kafka.strimzi.io", "kafka.strimzi.io", "Kafka"
                ),
            ]
        )

        getter = crds_from_apiextensions(mock_api)
        assert getter() == [
            GroupKind("postgresql.cnpg.io", "Cluster"),
            GroupKind("kafka.strimzi.io", "Kafka"),
        ]

    @pytest.mark.unit
    def test_skips_crd_without_names(self):
        broken = _make_mock_crd("broken.example.com", "example.com", "Broken")
        broken.spec.names = None
        mock_api = MagicMock()
        mock_api.list_custom_resource_definition.return_value = MagicMock(
            items=[broken, _make_mock_crd("widgets.internal.corp", "internal.corp", "Widget")]
        )

        assert crds_from_apiextensions(mock_api)() == [GroupKind("internal.corp", "Widget")]

    @pytest.mark.unit
    def test_skips_crd_without_names_or_metadata(self):
        broken = _make_mock_crd("broken.example.com", "example.com", "Broken")
        broken.spec.names = None
        broken.metadata = None
        mock_api = MagicMock()
        mock_api.list_custom_resource_definition.return_value = MagicMock(
            items=[broken, _make_mock_crd("widgets.internal.corp", "internal.corp", "Widget")]
        )

        assert crds_from_apiextensions(mock_api)() == [GroupKind("internal.corp", "Widget")]

    @pytest.mark.unit
    def test_listing_is_lazy(self):
        mock_api = MagicMock()
        mock_api.list_custom_resource_definition.return_value = MagicMock(items=[])

        finder = CRDFinder(crds_from_apiextensions(mock_api))
        mock_api.list_custom_resource_definition.assert_not_called()

        finder.find_resources()
        finder.find_resources()
        mock_api.list_custom_resource_definition.assert_called_once()
