"""Layer builder registry."""

from enum import Enum
from typing import Mapping, Optional

from layerhub.builders.geojson_builder import GeoJSONLayerBuilder
from layerhub.builders.wfs_builder import WFSLayerBuilder
from layerhub.builders.wms_builder import WMSLayerBuilder
from layerhub.core.errors import UnsupportedLayerTypeError
from layerhub.models.layer_builder import LayerBuilder


class LayerType(str, Enum):
    """Layer type tags understood by the registry."""

    WMS = "wms"
    WFS = "wfs"
    GEOJSON = "geojson"

    @classmethod
    def parse(cls, type_tag: str) -> Optional["LayerType"]:
        """Case-insensitive lookup of a type tag, None if unknown."""
        try:
            return cls(type_tag.lower())
        except (ValueError, AttributeError):
            return None


class LayerTypeRegistry:
    """Fixed mapping from layer types to the builders that create them."""

    def __init__(self, builders: Mapping[LayerType, LayerBuilder]):
        self._builders = dict(builders)

    def builder_for(self, type_tag: str) -> LayerBuilder:
        """Get the builder for the given type tag.

        Args:
            type_tag: Type tag from a descriptor (e.g., "WMS", "wfs")

        Returns:
            Builder instance

        Raises:
            UnsupportedLayerTypeError: If no builder handles the type
        """
        layer_type = LayerType.parse(type_tag)
        if layer_type is None or layer_type not in self._builders:
            raise UnsupportedLayerTypeError(type_tag, self.available_types())
        return self._builders[layer_type]

    def supports(self, type_tag: str) -> bool:
        layer_type = LayerType.parse(type_tag)
        return layer_type is not None and layer_type in self._builders

    def available_types(self) -> list[str]:
        return [layer_type.value for layer_type in self._builders]

    def describe(self) -> list[tuple[str, str]]:
        """Get list of supported types.

        Returns:
            List of (type_name, display_name) tuples
        """
        return [
            (builder.get_type_name(), builder.get_display_name())
            for builder in self._builders.values()
        ]


# Registry of available layer builders
LAYER_BUILDERS: dict[LayerType, LayerBuilder] = {
    LayerType.WMS: WMSLayerBuilder(),
    LayerType.GEOJSON: GeoJSONLayerBuilder(),
    LayerType.WFS: WFSLayerBuilder(),
}

LAYER_TYPES = LayerTypeRegistry(LAYER_BUILDERS)


def get_layer_builder(type_tag: str) -> LayerBuilder:
    """Get the builder for a type tag from the default registry."""
    return LAYER_TYPES.builder_for(type_tag)


__all__ = [
    "LAYER_BUILDERS",
    "LAYER_TYPES",
    "LayerType",
    "LayerTypeRegistry",
    "get_layer_builder",
    "GeoJSONLayerBuilder",
    "WFSLayerBuilder",
    "WMSLayerBuilder",
]
