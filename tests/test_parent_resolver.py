"""
Parent resolver tests: one level up the district < area < unit hierarchy,
no lookup for districts, and silent degradation on transport errors.
"""

import logging

import pytest

from welfaredesk.app.parent_resolver import ParentResolver


def test_district_has_no_parents_and_makes_no_call(api):
    resolver = ParentResolver(api)

    assert resolver.resolve_parents("district") == []
    assert api.calls == []


def test_area_parents_are_active_districts_sorted_by_name(api):
    parents = ParentResolver(api).resolve_parents("area")

    assert [node.node_id for node in parents] == ["d2", "d1"]
    assert api.calls_to("list_by_type") == [("list_by_type", "district", True)]


def test_unit_parents_are_areas(api):
    parents = ParentResolver(api).resolve_parents("unit")

    assert [node.name for node in parents] == ["Riverside"]


def test_transport_error_yields_empty_list_and_logs(api, caplog):
    api.fail("list_by_type")
    resolver = ParentResolver(api, logger=logging.getLogger("tests.parents"))

    with caplog.at_level(logging.WARNING, logger="tests.parents"):
        parents = resolver.resolve_parents("area")

    assert parents == []
    assert "Failed to load district candidates" in caplog.text


def test_unknown_type_raises(api):
    with pytest.raises(ValueError):
        ParentResolver(api).resolve_parents("province")
