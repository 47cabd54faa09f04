"""Exceptions raised inside the layer resolution core."""


class LayerResolutionError(Exception):
    """Base class for errors raised while resolving layers."""


class ServicesFetchError(LayerResolutionError):
    """The services registry could not be retrieved or parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to load services from {url}: {reason}")
        self.url = url
        self.reason = reason


class UnsupportedLayerTypeError(LayerResolutionError, ValueError):
    """No builder is registered for a descriptor's type tag."""

    def __init__(self, type_tag: str, supported: list[str]):
        super().__init__(
            f"Unsupported layer type: {type_tag!r}. Supported types: {', '.join(supported)}"
        )
        self.type_tag = type_tag
