"""Layer descriptor model."""

from dataclasses import dataclass, field
from typing import Any, Mapping

from layerhub.core.config import DATASET_ID_KEY


@dataclass(frozen=True)
class LayerDescriptor:
    """Description of how to build one map layer, as listed in a services registry.

    Only the fields the resolution core relies on are lifted out of the raw
    entry. Everything else (format, layers, gutter, ...) stays available
    through ``attributes`` and ``get()`` for the type-specific builders.
    """

    id: str
    typ: str = ""
    name: str = ""
    url: str = ""
    feature_type: str = ""
    datasets: tuple[Mapping[str, Any], ...] = ()
    attributes: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def layer_type(self) -> str:
        """Type tag normalized to lower case ("wms", "wfs", ...)."""
        return self.typ.lower()

    @property
    def dataset_ids(self) -> list[str]:
        """md_id values of all datasets this layer belongs to."""
        return [
            dataset[DATASET_ID_KEY]
            for dataset in self.datasets
            if isinstance(dataset, Mapping) and DATASET_ID_KEY in dataset
        ]

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw attribute by its registry key."""
        return self.attributes.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the raw registry representation.

        Returns:
            Copy of the raw attribute dictionary
        """
        return dict(self.attributes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayerDescriptor":
        """
        Create a descriptor from a raw services registry entry.

        Missing fields default to empty strings; no further validation is done.

        Args:
            data: Raw descriptor mapping (e.g. one element of services.json)

        Returns:
            LayerDescriptor instance
        """
        datasets = data.get("datasets") or ()
        if isinstance(datasets, Mapping):
            datasets = (datasets,)

        attributes = dict(data)
        layer_id = str(data.get("id") or "")
        if "id" in attributes:
            # Registries written in YAML may carry numeric ids
            attributes["id"] = layer_id

        return cls(
            id=layer_id,
            typ=str(data.get("typ") or ""),
            name=str(data.get("name") or ""),
            url=str(data.get("url") or ""),
            feature_type=str(data.get("featureType") or ""),
            datasets=tuple(datasets),
            attributes=attributes,
        )
