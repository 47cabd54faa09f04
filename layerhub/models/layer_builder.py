"""Protocol for layer builders."""

from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol

from layerhub.models.descriptor import LayerDescriptor

if TYPE_CHECKING:
    from layerhub.map.layer import Layer


class LayerBuilder(Protocol):
    """Protocol defining the interface for type-specific layer builders.

    Each layer type (WMS, WFS, GeoJSON, ...) implements this protocol to be
    selectable through the layer type registry.
    """

    @staticmethod
    def get_type_name() -> str:
        """Get the type tag this builder handles.

        Returns:
            Lower case type tag (e.g., "wms", "wfs", "geojson")
        """
        ...

    @staticmethod
    def get_display_name() -> str:
        """Get the human-readable name of the layer type.

        Returns:
            Display name (e.g., "Web Map Service")
        """
        ...

    def create_layer(
        self,
        descriptor: LayerDescriptor,
        options: Optional[Mapping[str, Any]] = None,
    ) -> "Layer":
        """Build a renderable layer from a descriptor.

        Args:
            descriptor: Descriptor taken from the services registry
            options: Builder options; the map integration passes {"map": host_map}

        Returns:
            Layer carrying the descriptor's id
        """
        ...
