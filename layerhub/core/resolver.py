"""Matching of layer descriptors against partial attribute specs."""

from typing import Any, Iterable, Mapping, Optional

from layerhub.core.config import DATASET_ID_KEY, DATASET_LAYER_TYPE
from layerhub.models.descriptor import LayerDescriptor

_MISSING = object()


def count_direct_matches(descriptor: LayerDescriptor, match_spec: Mapping[str, Any]) -> int:
    """Count the keys of match_spec whose value equals the descriptor's raw attribute."""
    return sum(
        1 for key, value in match_spec.items()
        if descriptor.get(key, _MISSING) == value
    )


def dataset_exception_applies(descriptor: LayerDescriptor, match_spec: Mapping[str, Any]) -> bool:
    """
    Check whether a WMS descriptor belongs to the dataset requested by md_id.

    WMS services are catalogued per dataset, so their md_id lives inside the
    ``datasets`` list instead of on the descriptor itself.
    """
    md_id = match_spec.get(DATASET_ID_KEY)
    if not md_id:
        return False
    if descriptor.typ.upper() != DATASET_LAYER_TYPE:
        return False
    return md_id in descriptor.dataset_ids


def matches(descriptor: LayerDescriptor, match_spec: Mapping[str, Any]) -> bool:
    """
    Check whether a descriptor satisfies every key of match_spec.

    The dataset exception adds one satisfied key on top of the direct
    matches, so md_id may be satisfied either way, but never counts twice.
    An empty match spec matches every descriptor.
    """
    satisfied = count_direct_matches(descriptor, match_spec)
    md_id_direct = descriptor.get(DATASET_ID_KEY, _MISSING) == match_spec.get(DATASET_ID_KEY)
    if not md_id_direct and dataset_exception_applies(descriptor, match_spec):
        satisfied += 1
    return satisfied >= len(match_spec)


def resolve_descriptors(
    descriptors: Iterable[LayerDescriptor],
    match_spec: Mapping[str, Any],
) -> list[LayerDescriptor]:
    """
    Select all descriptors matching a match spec, preserving their order.

    Args:
        descriptors: Candidate descriptors
        match_spec: Attribute map; md_id also matches WMS datasets

    Returns:
        Matching descriptors
    """
    return [descriptor for descriptor in descriptors if matches(descriptor, match_spec)]


def find_first(
    descriptors: Iterable[LayerDescriptor],
    match_spec: Mapping[str, Any],
) -> Optional[LayerDescriptor]:
    """Get the first descriptor whose raw attributes equal every value in match_spec."""
    for descriptor in descriptors:
        if count_direct_matches(descriptor, match_spec) == len(match_spec):
            return descriptor
    return None
