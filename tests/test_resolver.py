"""Tests for descriptor matching."""

from layerhub.core.resolver import dataset_exception_applies, find_first, matches, resolve_descriptors
from layerhub.models.descriptor import LayerDescriptor
from tests.services_fixtures import HOSPITALS_MD_ID, SERVICES, STADTPLAN_MD_ID


def _descriptors():
    return [LayerDescriptor.from_dict(raw) for raw in SERVICES]


def _ids(descriptors):
    return [descriptor.id for descriptor in descriptors]


def test_single_attribute_match():
    """Test matching on one direct attribute."""
    assert _ids(resolve_descriptors(_descriptors(), {"typ": "WMS"})) == ["2001", "453"]


def test_all_attributes_must_match():
    """Test AND semantics across attributes."""
    descriptors = _descriptors()

    assert _ids(resolve_descriptors(descriptors, {"typ": "WMS", "name": "Luftbilder"})) == ["453"]
    assert resolve_descriptors(descriptors, {"typ": "WFS", "name": "Luftbilder"}) == []


def test_values_compare_by_equality_not_case():
    """Test that attribute values are compared exactly."""
    assert resolve_descriptors(_descriptors(), {"typ": "wms"}) == []


def test_md_id_matches_wms_datasets():
    """Test that md_id is found inside the datasets of WMS descriptors."""
    matched = resolve_descriptors(_descriptors(), {"md_id": STADTPLAN_MD_ID})

    # No descriptor carries md_id at top level, both WMS belong to the dataset
    assert _ids(matched) == ["2001", "453"]


def test_md_id_dataset_lookup_is_restricted_to_wms():
    """Test that non-WMS descriptors are not matched through their datasets."""
    assert resolve_descriptors(_descriptors(), {"md_id": HOSPITALS_MD_ID}) == []


def test_md_id_dataset_match_combines_with_other_attributes():
    """Test that a dataset match satisfies md_id but other keys still apply."""
    descriptors = _descriptors()

    matched = resolve_descriptors(descriptors, {"md_id": STADTPLAN_MD_ID, "name": "Stadtplan"})
    assert _ids(matched) == ["2001"]

    assert resolve_descriptors(descriptors, {"md_id": STADTPLAN_MD_ID, "name": "Unknown"}) == []


def test_md_id_direct_and_dataset_match_count_once():
    """Test that md_id matching both ways does not compensate for another key."""
    descriptor = LayerDescriptor.from_dict({
        "id": "1",
        "typ": "WMS",
        "name": "Direct",
        "md_id": "X-1",
        "datasets": [{"md_id": "X-1"}],
    })

    assert matches(descriptor, {"md_id": "X-1"})
    assert not matches(descriptor, {"md_id": "X-1", "name": "Other"})


def test_md_id_top_level_match_for_any_type():
    """Test that a top-level md_id matches directly regardless of type."""
    descriptor = LayerDescriptor.from_dict({"id": "1", "typ": "WFS", "md_id": "X-2"})

    assert matches(descriptor, {"md_id": "X-2"})
    assert not dataset_exception_applies(descriptor, {"md_id": "X-2"})


def test_dataset_type_check_ignores_case():
    """Test that lower case wms descriptors take part in the dataset lookup."""
    descriptor = LayerDescriptor.from_dict({"id": "1", "typ": "wms", "datasets": [{"md_id": "X-3"}]})

    assert dataset_exception_applies(descriptor, {"md_id": "X-3"})


def test_empty_match_spec_matches_everything():
    """An empty match spec matches every descriptor."""
    descriptors = _descriptors()

    assert resolve_descriptors(descriptors, {}) == descriptors


def test_missing_attribute_does_not_equal_none():
    """Test that an absent attribute is not matched by an explicit None."""
    assert resolve_descriptors(_descriptors(), {"featureType": None}) == []


def test_find_first_uses_direct_fields_only():
    """Test that the first-match lookup ignores the dataset exception."""
    descriptors = _descriptors()

    assert find_first(descriptors, {"id": "453"}).name == "Luftbilder"
    assert find_first(descriptors, {"typ": "WMS"}).id == "2001"
    assert find_first(descriptors, {"md_id": STADTPLAN_MD_ID}) is None
    assert find_first(descriptors, {"id": "missing"}) is None
