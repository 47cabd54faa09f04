"""Map host interface and the in-process layer map."""

import logging
from typing import Optional, Protocol

from layerhub.map.layer import Layer

logger = logging.getLogger(__name__)


class MapHost(Protocol):
    """Native layer-mutation surface of a map wrapped by MapIntegration."""

    def add_layer(self, layer: Layer) -> None:
        ...

    def remove_layer(self, layer: Optional[Layer]) -> Optional[Layer]:
        ...

    def get_layers(self) -> list[Layer]:
        ...


class LayerMap:
    """Minimal map holding an ordered collection of attached layers."""

    def __init__(self, target: str = "map"):
        """
        Initialize an empty map.

        Args:
            target: Name of the element the map renders to
        """
        self.target = target
        self._layers: list[Layer] = []

    def add_layer(self, layer: Layer) -> None:
        """
        Attach a layer on top of the existing ones.

        Raises:
            ValueError: If the layer is already attached
        """
        if any(existing is layer for existing in self._layers):
            raise ValueError(f"Layer already attached to map: {layer!r}")
        self._layers.append(layer)

    def remove_layer(self, layer: Optional[Layer]) -> Optional[Layer]:
        """
        Detach a layer.

        Args:
            layer: Layer to remove; None and unknown layers are ignored

        Returns:
            The removed layer, or None if it was not attached
        """
        for index, existing in enumerate(self._layers):
            if existing is layer:
                return self._layers.pop(index)
        logger.debug(f"Layer not attached, nothing removed: {layer!r}")
        return None

    def get_layers(self) -> list[Layer]:
        """Get a snapshot of the attached layers, bottom to top."""
        return list(self._layers)
