"""Renderable layer objects produced by the layer builders."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class TileSource:
    """Tiled image source (e.g. WMS GetMap)."""

    url: str
    params: dict[str, Any] = field(default_factory=dict)
    tile_size: Optional[int] = None
    gutter: int = 0


@dataclass
class VectorSource:
    """Feature source, either loaded from ``url`` or holding inline features."""

    url: Optional[str] = None
    features: list[Any] = field(default_factory=list)

    def add_features(self, features: list[Any]):
        self.features.extend(features)


class Layer:
    """A map layer with observable-style properties.

    Properties such as "id" and "name" are kept in a plain dictionary and
    accessed through get()/set(), visibility and opacity have dedicated
    accessors.
    """

    def __init__(self, source=None, visible: bool = True, opacity: float = 1.0, **properties):
        self._source = source
        self._visible = visible
        self._opacity = opacity
        self._properties: dict[str, Any] = dict(properties)

    def get(self, key: str, default: Any = None) -> Any:
        return self._properties.get(key, default)

    def set(self, key: str, value: Any):
        self._properties[key] = value

    def get_source(self):
        return self._source

    def get_visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool):
        self._visible = visible

    def get_opacity(self) -> float:
        return self._opacity

    def set_opacity(self, opacity: float):
        self._opacity = opacity

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.get('id')!r}, name={self.get('name')!r})"


class TileLayer(Layer):
    """Layer rendering a tiled image source."""


class VectorLayer(Layer):
    """Layer rendering a feature source."""
