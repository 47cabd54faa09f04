"""Id- and attribute-based layer management on top of a map host."""

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from layerhub.builders import LAYER_TYPES, LayerTypeRegistry
from layerhub.core.config import DATASET_ID_KEY
from layerhub.core.descriptor_store import DESCRIPTOR_STORE, DescriptorStore, ReadyCallback
from layerhub.core.errors import UnsupportedLayerTypeError
from layerhub.map.host import LayerMap, MapHost
from layerhub.map.layer import Layer
from layerhub.models.descriptor import LayerDescriptor
from layerhub.models.identifier import IdentifierKind, classify_identifier
from layerhub.models.layer_state import LayerState
from layerhub.models.map_config import MapConfiguration

logger = logging.getLogger(__name__)

LayerParams = Union[LayerState, Mapping[str, Any], None]


def _as_state(params: LayerParams) -> LayerState:
    if isinstance(params, LayerState):
        return params
    return LayerState.from_params(params)


class MapIntegration:
    """Adds layers to a map by registry id, dataset id or attribute lookup.

    Wraps one map host; the host's own add_layer/remove_layer stay reachable
    through ``map`` and are used for everything that is not resolved here.

    add_layer() with a registry id is synchronous and only sees descriptors
    that are already in the store. Dataset ids and create_layer() go through
    the store's asynchronous resolution, which waits for the registry to load.
    """

    def __init__(
        self,
        map_host: MapHost,
        store: Optional[DescriptorStore] = None,
        layer_types: Optional[LayerTypeRegistry] = None,
        services_url: Optional[str] = None,
    ):
        """
        Initialize the integration.

        Args:
            map_host: Map whose layer collection is managed
            store: Descriptor store, defaults to the shared DESCRIPTOR_STORE
            layer_types: Builder registry, defaults to LAYER_TYPES
            services_url: Registry URL used by create_layer when none is given
        """
        self.map = map_host
        self.store = store if store is not None else DESCRIPTOR_STORE
        self.layer_types = layer_types if layer_types is not None else LAYER_TYPES
        self.services_url = services_url
        self._pending: set[asyncio.Task] = set()

    def add_layer(
        self,
        layer_or_id: Union[str, Layer, Any],
        params: LayerParams = None,
        kind: Optional[IdentifierKind] = None,
    ) -> Optional[Layer]:
        """
        Add a layer to the map, looking it up by id if a string is given.

        A dataset id only schedules create_layer() on the running loop and
        returns None; use create_layer() directly to get hold of those layers.

        Args:
            layer_or_id: Registry id, dataset id or a ready layer object
            params: Initial state, LayerState or {"visibility": bool, "transparency": 0-100}
            kind: Identifier kind; derived from the string content if omitted

        Returns:
            The added layer, or None if nothing was added synchronously
        """
        if layer_or_id is None:
            logger.error("No layer or id given. No layer added to map.")
            return None

        if not isinstance(layer_or_id, str):
            self.map.add_layer(layer_or_id)
            return layer_or_id

        kind = kind or classify_identifier(layer_or_id)
        if kind is IdentifierKind.DATASET_ID:
            self._schedule_create(layer_or_id, params)
            return None

        return self._add_by_id(layer_or_id, _as_state(params))

    def _add_by_id(self, layer_id: str, state: LayerState) -> Optional[Layer]:
        descriptor = self.store.get_where({"id": layer_id})
        if descriptor is None:
            logger.error(f"Layer with id '{layer_id}' not found. No layer added to map.")
            return None

        try:
            builder = self.layer_types.builder_for(descriptor.typ)
        except UnsupportedLayerTypeError:
            logger.error(
                f"Layer with id '{layer_id}' has unknown type '{descriptor.typ}'. No layer added to map."
            )
            return None

        try:
            layer = builder.create_layer(descriptor, {"map": self.map})
        except Exception as e:
            logger.exception(f"Failed to build layer with id '{layer_id}': {e}. No layer added to map.")
            return None

        layer.set("name", descriptor.name)
        state.apply(layer)
        self.map.add_layer(layer)
        logger.debug(f"Added layer {layer_id} ({descriptor.name}) to map")
        return layer

    def _schedule_create(self, dataset_id: str, params: LayerParams):
        try:
            task = asyncio.get_running_loop().create_task(
                self.create_layer(dataset_id, params=params)
            )
        except RuntimeError:
            logger.error(f"No running event loop, layers for dataset '{dataset_id}' not added.")
            return
        self._pending.add(task)
        task.add_done_callback(self._on_create_done)

    def _on_create_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Failed to add dataset layers: {task.exception()}")

    async def wait_pending(self) -> None:
        """Wait until all layers scheduled by add_layer() with dataset ids are attached."""
        while self._pending:
            pending = list(self._pending)
            await asyncio.gather(*pending, return_exceptions=True)
            self._pending.difference_update(pending)

    def remove_layer(self, layer_or_id: Union[str, Layer, None]) -> Optional[Layer]:
        """
        Remove a layer from the map, looking it up among attached layers if an id is given.

        An unknown id results in None being passed to the host, which removes nothing.

        Args:
            layer_or_id: Layer object or value of its "id" property

        Returns:
            The removed layer, or None
        """
        layer = layer_or_id
        if isinstance(layer_or_id, str):
            layer = next(
                (
                    attached
                    for attached in self.map.get_layers()
                    if isinstance(attached, Layer) and attached.get("id") == layer_or_id
                ),
                None,
            )
            if layer is None:
                logger.warning(f"Layer with id '{layer_or_id}' is not on the map. Nothing removed.")
        return self.map.remove_layer(layer)

    async def create_layer(
        self,
        match_spec: Union[str, Mapping[str, Any], LayerDescriptor],
        limit: Optional[int] = None,
        source_url: Optional[str] = None,
        params: LayerParams = None,
    ) -> list[Layer]:
        """
        Resolve descriptors from the registry and add a layer for each of them.

        Args:
            match_spec: Dataset id (md_id), attribute map or raw descriptor
            limit: Maximum number of layers to add; all matches if None or 0
            source_url: Registry URL used if the store is not loaded yet
            params: Initial state applied to every created layer

        Returns:
            Created layers in the order their descriptors matched, possibly empty
        """
        if isinstance(match_spec, str):
            match_spec = {DATASET_ID_KEY: match_spec}
        elif isinstance(match_spec, LayerDescriptor):
            match_spec = match_spec.to_dict()

        descriptors = await self.store.resolve_all(match_spec, source_url or self.services_url)

        count = min(limit or len(descriptors), len(descriptors))
        state = _as_state(params)
        layers = []
        for descriptor in descriptors[:max(count, 0)]:
            self.store.register(descriptor)
            layer = self._add_by_id(descriptor.id, state)
            if layer is not None:
                layers.append(layer)

        if not layers:
            logger.warning(f"No layers created for {match_spec!r}")
        return layers


def create_map(
    config: MapConfiguration,
    store: Optional[DescriptorStore] = None,
    layer_types: Optional[LayerTypeRegistry] = None,
    callback: Optional[ReadyCallback] = None,
) -> MapIntegration:
    """
    Create a map and start loading its services registry.

    Once the registry is ready the configured initial layers are added, then
    the optional callback receives (descriptors, error). Must be called from
    within the running event loop.

    Args:
        config: Validated map configuration
        store: Descriptor store, defaults to the shared DESCRIPTOR_STORE
        layer_types: Builder registry, defaults to LAYER_TYPES
        callback: Optional callback(descriptors, error)

    Returns:
        MapIntegration wrapping the new map
    """
    integration = MapIntegration(
        LayerMap(target=config.target),
        store=store,
        layer_types=layer_types,
        services_url=config.services_url,
    )

    def on_ready(descriptors, error):
        try:
            for initial in config.layers:
                integration.add_layer(initial.id, initial.state())
        finally:
            if callback is not None:
                callback(descriptors, error)

    integration.store.initialize(config.layer_conf, on_ready)
    return integration
