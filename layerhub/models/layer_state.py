"""Initial display state for layers added to a map."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from layerhub.core.config import DEFAULT_TRANSPARENCY, DEFAULT_VISIBILITY


@dataclass(frozen=True)
class LayerState:
    """Visibility and transparency applied to a layer before it is attached."""

    visibility: bool = DEFAULT_VISIBILITY
    transparency: float = DEFAULT_TRANSPARENCY  # 0-100

    @property
    def opacity(self) -> float:
        """Opacity in the 0-1 range the layer objects expect."""
        return (100 - self.transparency) / 100

    def apply(self, layer):
        """
        Apply this state to a layer.

        Args:
            layer: Layer exposing set_visible() and set_opacity()

        Returns:
            The same layer
        """
        layer.set_visible(self.visibility)
        layer.set_opacity(self.opacity)
        return layer

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]]) -> "LayerState":
        """
        Create state from loosely typed parameters.

        A visibility that is not a boolean counts as visible and a transparency
        that is not a number counts as fully opaque. Values are not range-checked.

        Args:
            params: Mapping with optional "visibility" and "transparency" keys, or None

        Returns:
            LayerState instance
        """
        if not params:
            return cls()

        visibility = params.get("visibility", DEFAULT_VISIBILITY)
        transparency = params.get("transparency", DEFAULT_TRANSPARENCY)

        if not isinstance(visibility, bool):
            visibility = DEFAULT_VISIBILITY
        # bool is an int subclass but never a meaningful percentage
        if isinstance(transparency, bool) or not isinstance(transparency, (int, float)):
            transparency = DEFAULT_TRANSPARENCY

        return cls(visibility=visibility, transparency=transparency)
