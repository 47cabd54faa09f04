"""Map configuration schema."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from layerhub.core.config import DEFAULT_SERVICES_URL, DEFAULT_TRANSPARENCY, DEFAULT_VISIBILITY
from layerhub.models.layer_state import LayerState


class InitialLayer(BaseModel):
    """A layer added to the map as soon as the services registry is ready."""

    model_config = ConfigDict(extra="allow")

    id: str
    visibility: bool = DEFAULT_VISIBILITY
    transparency: float = Field(default=DEFAULT_TRANSPARENCY, ge=0, le=100)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value):
        # YAML reads unquoted registry ids as integers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def state(self) -> LayerState:
        return LayerState(visibility=self.visibility, transparency=self.transparency)


class MapConfiguration(BaseModel):
    """Configuration of a map and the services registry it draws layers from."""

    target: str = "map"
    layer_conf: Union[str, list[dict[str, Any]]] = DEFAULT_SERVICES_URL
    services_url: Optional[str] = None
    layers: list[InitialLayer] = Field(default_factory=list)

    @field_validator("layers", mode="before")
    @classmethod
    def _expand_layer_ids(cls, value):
        # Layers may be listed as plain ids
        if isinstance(value, list):
            return [item if isinstance(item, dict) else {"id": item} for item in value]
        return value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MapConfiguration":
        """
        Create configuration from a dictionary (loaded from YAML).

        Args:
            data: Configuration dictionary

        Returns:
            MapConfiguration instance

        Raises:
            pydantic.ValidationError: If the configuration is invalid
        """
        return cls.model_validate(data or {})
