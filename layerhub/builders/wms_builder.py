"""WMS layer builder."""

from typing import Any, Mapping, Optional

from layerhub.core.config import WMS_DEFAULT_FORMAT, WMS_DEFAULT_VERSION
from layerhub.map.layer import TileLayer, TileSource
from layerhub.models.descriptor import LayerDescriptor


def build_get_map_params(descriptor: LayerDescriptor) -> dict[str, Any]:
    """
    Build the GetMap request parameters for a WMS descriptor.

    Args:
        descriptor: WMS descriptor from the services registry

    Returns:
        Dictionary of upper case WMS parameters
    """
    transparent = descriptor.get("transparent", True)
    return {
        "LAYERS": descriptor.get("layers", ""),
        "FORMAT": descriptor.get("format") or WMS_DEFAULT_FORMAT,
        "VERSION": descriptor.get("version") or WMS_DEFAULT_VERSION,
        "TRANSPARENT": str(transparent).lower(),
    }


class WMSLayerBuilder:
    """Builds tiled layers for Web Map Service descriptors."""

    @staticmethod
    def get_type_name() -> str:
        return "wms"

    @staticmethod
    def get_display_name() -> str:
        return "Web Map Service"

    def create_layer(
        self,
        descriptor: LayerDescriptor,
        options: Optional[Mapping[str, Any]] = None,
    ) -> TileLayer:
        """Create a tile layer requesting GetMap images from the descriptor's URL."""
        tile_size = descriptor.get("tilesize")
        source = TileSource(
            url=descriptor.url,
            params=build_get_map_params(descriptor),
            tile_size=int(tile_size) if tile_size else None,
            gutter=int(descriptor.get("gutter") or 0),
        )
        return TileLayer(source=source, id=descriptor.id)
