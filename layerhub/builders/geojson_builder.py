"""GeoJSON layer builder."""

from typing import Any, Mapping, Optional

from layerhub.map.layer import VectorLayer, VectorSource
from layerhub.models.descriptor import LayerDescriptor


def extract_features(data: Any) -> list[Any]:
    """Get the feature list out of a FeatureCollection, a feature list or None."""
    if data is None:
        return []
    if isinstance(data, Mapping):
        if data.get("type") == "FeatureCollection":
            return list(data.get("features", []))
        return [data]
    return list(data)


class GeoJSONLayerBuilder:
    """Builds vector layers for inline or remote GeoJSON descriptors."""

    @staticmethod
    def get_type_name() -> str:
        return "geojson"

    @staticmethod
    def get_display_name() -> str:
        return "GeoJSON"

    def create_layer(
        self,
        descriptor: LayerDescriptor,
        options: Optional[Mapping[str, Any]] = None,
    ) -> VectorLayer:
        # Inline features take precedence over the URL
        features = extract_features(descriptor.get("features"))
        source = VectorSource(url=None if features else (descriptor.url or None))
        source.add_features(features)
        return VectorLayer(source=source, id=descriptor.id)
