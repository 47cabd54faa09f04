"""WFS layer builder."""

from typing import Any, Mapping, Optional

from layerhub.core.config import WFS_VERSION
from layerhub.map.layer import VectorLayer, VectorSource
from layerhub.models.descriptor import LayerDescriptor


def build_get_feature_url(
    descriptor: LayerDescriptor,
    query: Optional[Mapping[str, Any]] = None,
    wfs_version: str = WFS_VERSION,
) -> str:
    """
    Build the GetFeature request URL for a WFS descriptor.

    Args:
        descriptor: WFS descriptor; missing url and featureType become ""
        query: Additional query parameters, list values are joined with ","
        wfs_version: WFS protocol version

    Returns:
        Request URL
    """
    url = (
        f"{descriptor.url}?service=WFS&version={wfs_version}"
        f"&request=GetFeature&typename={descriptor.feature_type}"
    )
    for key, value in (query or {}).items():
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        url += f"&{key}={value}"
    return url


class WFSLayerBuilder:
    """Builds vector layers for Web Feature Service descriptors."""

    @staticmethod
    def get_type_name() -> str:
        return "wfs"

    @staticmethod
    def get_display_name() -> str:
        return "Web Feature Service"

    def create_layer(
        self,
        descriptor: LayerDescriptor,
        options: Optional[Mapping[str, Any]] = None,
    ) -> VectorLayer:
        """
        Create a vector layer backed by a GetFeature request.

        Args:
            descriptor: WFS descriptor
            options: Optional "query" (extra request parameters) and "features"
                (features to add up front)
        """
        options = options or {}
        source = VectorSource(url=build_get_feature_url(descriptor, options.get("query")))
        source.add_features(list(options.get("features", [])))
        return VectorLayer(source=source, id=descriptor.id)
