"""Process-wide registry of known layer descriptors."""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Optional, Union

from layerhub.core.config import DEFAULT_SERVICES_URL
from layerhub.core.errors import ServicesFetchError
from layerhub.core.resolver import find_first, resolve_descriptors
from layerhub.core.services_client import fetch_services
from layerhub.models.descriptor import LayerDescriptor

logger = logging.getLogger(__name__)

MatchSpec = Union[str, Mapping[str, Any]]
RegistrySource = Union[str, Iterable[Union[Mapping[str, Any], LayerDescriptor]], None]


class StoreState(Enum):
    """Lifecycle of a descriptor store."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class LoadResult(NamedTuple):
    """Outcome of a registry load, delivered to everyone waiting for readiness."""

    descriptors: list[LayerDescriptor]
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


ReadyCallback = Callable[[list[LayerDescriptor], Optional[Exception]], Any]


def _as_match_spec(match_spec: MatchSpec) -> Mapping[str, Any]:
    if isinstance(match_spec, str):
        return {"id": match_spec}
    return match_spec


class DescriptorStore:
    """Registry of layer descriptors keyed by id.

    The store is filled once from a services registry (URL or in-memory list)
    and afterwards grows through register(). Readiness is represented by a
    single shared future; waiters attached to it are notified in the order
    they were attached.

    Uniqueness policy: register() replaces an existing id, bulk loads never
    overwrite an id that is already known.
    """

    def __init__(self):
        self._descriptors: dict[str, LayerDescriptor] = {}
        self._state = StoreState.UNINITIALIZED
        self._ready: Optional[asyncio.Future] = None
        self._load_task: Optional[asyncio.Task] = None
        self.source: Optional[str] = None

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is StoreState.READY

    @property
    def descriptors(self) -> list[LayerDescriptor]:
        """Snapshot of all known descriptors in insertion order."""
        return list(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, layer_id: str) -> bool:
        return layer_id in self._descriptors

    def initialize(
        self,
        source: RegistrySource = None,
        on_ready: Optional[ReadyCallback] = None,
    ) -> asyncio.Future:
        """
        Start loading the registry, or join a load that is already running.

        Must be called from within the running event loop. Callbacks are
        always delivered through the loop, even when the source is an
        in-memory list or the store is already ready.

        Args:
            source: Services URL or list of raw descriptors; defaults to DEFAULT_SERVICES_URL
            on_ready: Optional callback(descriptors, error) run once the load has finished

        Returns:
            Future resolving to a LoadResult
        """
        loop = asyncio.get_running_loop()

        if self._ready is None:
            self._ready = loop.create_future()
            self._state = StoreState.LOADING

            if source is None or isinstance(source, str):
                self.source = source or DEFAULT_SERVICES_URL
                logger.info(f"Loading services registry from {self.source}")
                self._load_task = loop.create_task(self._load_from_url(self.source))
            else:
                self.source = None
                self._complete(LoadResult(self.load(source)))
        else:
            logger.debug(f"Services registry already {self._state.value}, not loading again")

        ready = self._ready
        if on_ready is not None:
            ready.add_done_callback(lambda future: self._notify(on_ready, future))
        return ready

    async def _load_from_url(self, url: str):
        try:
            raw_descriptors = await fetch_services(url)
        except ServicesFetchError as e:
            logger.error(str(e))
            self._complete(LoadResult([], e))
        except Exception as e:
            logger.exception(f"Unexpected error loading services from {url}: {e}")
            self._complete(LoadResult([], e))
        else:
            self._complete(LoadResult(self.load(raw_descriptors)))

    def _complete(self, result: LoadResult):
        ready = self._ready
        if result.ok:
            self._state = StoreState.READY
            logger.info(f"Services registry ready with {len(self)} descriptors")
        else:
            # Allow a later initialize() to try again
            self._state = StoreState.UNINITIALIZED
            self._ready = None
        ready.set_result(result)

    @staticmethod
    def _notify(on_ready: ReadyCallback, future: asyncio.Future):
        result = future.result()
        try:
            on_ready(result.descriptors, result.error)
        except Exception as e:
            logger.exception(f"Error in services registry callback: {e}")

    def load(self, raw_descriptors: Iterable[Any]) -> list[LayerDescriptor]:
        """
        Merge a batch of descriptors into the store.

        Entries without an id cannot be keyed and are skipped. Ids that are
        already known keep their existing descriptor.

        Args:
            raw_descriptors: Raw registry entries or LayerDescriptor instances

        Returns:
            Descriptors parsed from the batch
        """
        loaded = []
        for raw in raw_descriptors:
            if isinstance(raw, LayerDescriptor):
                descriptor = raw
            elif isinstance(raw, Mapping):
                descriptor = LayerDescriptor.from_dict(raw)
            else:
                logger.warning(f"Skipping services entry that is not an object: {raw!r}")
                continue

            if not descriptor.id:
                logger.warning(f"Skipping services entry without id: {descriptor.to_dict()!r}")
                continue

            loaded.append(descriptor)
            if descriptor.id in self._descriptors:
                logger.debug(f"Keeping already registered descriptor {descriptor.id}")
                continue
            self._descriptors[descriptor.id] = descriptor

        return loaded

    def register(self, descriptor: Union[LayerDescriptor, Mapping[str, Any]]) -> LayerDescriptor:
        """
        Insert or replace a single descriptor.

        Args:
            descriptor: LayerDescriptor or raw registry entry

        Returns:
            The registered descriptor
        """
        if not isinstance(descriptor, LayerDescriptor):
            descriptor = LayerDescriptor.from_dict(descriptor)
        self._descriptors[descriptor.id] = descriptor
        return descriptor

    def get_where(self, match_spec: MatchSpec) -> Optional[LayerDescriptor]:
        """
        Find the first known descriptor whose attributes equal every value in match_spec.

        Does not wait for the registry to load and ignores the dataset exception.

        Args:
            match_spec: Layer id or attribute map

        Returns:
            Matching descriptor, or None
        """
        return find_first(self._descriptors.values(), _as_match_spec(match_spec))

    async def resolve_all(
        self,
        match_spec: MatchSpec,
        source_url: Optional[str] = None,
    ) -> list[LayerDescriptor]:
        """
        Find all descriptors matching a match spec, loading the registry first if needed.

        Never raises for an unavailable registry; the failure is logged and an
        empty list is returned.

        Args:
            match_spec: Layer id or attribute map; md_id also matches WMS datasets
            source_url: Registry URL used if the store has not been initialized

        Returns:
            Matching descriptors in registry order, possibly empty
        """
        if not self.is_ready:
            result = await self.initialize(source_url)
            if not result.ok:
                logger.error(f"No layers resolved for {match_spec!r}: services registry unavailable")
                return []

        matched = resolve_descriptors(self._descriptors.values(), _as_match_spec(match_spec))
        logger.debug(f"Resolved {len(matched)} descriptors for {match_spec!r}")
        return matched


# Shared store used by maps that are not given their own
DESCRIPTOR_STORE = DescriptorStore()
