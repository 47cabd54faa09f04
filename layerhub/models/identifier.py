"""Identifier kinds accepted by the map integration."""

from enum import Enum


class IdentifierKind(Enum):
    """What a string passed to ``add_layer`` refers to."""

    LAYER_ID = "layer_id"  # services registry id, e.g. "2001"
    DATASET_ID = "dataset_id"  # metadata catalog md_id, formatted as a UUID


def classify_identifier(identifier: str) -> IdentifierKind:
    """
    Determine the kind of a layer identifier from its content.

    Dataset ids are UUIDs while registry ids are plain numbers, so any dash
    marks a dataset id.

    Args:
        identifier: Layer id or dataset id

    Returns:
        IdentifierKind of the identifier
    """
    if "-" in identifier:
        return IdentifierKind.DATASET_ID
    return IdentifierKind.LAYER_ID
