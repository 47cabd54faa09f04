"""CLI mode for building maps and querying registries from YAML config."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from layerhub.core.descriptor_store import DescriptorStore, LoadResult
from layerhub.map.integration import MapIntegration, create_map
from layerhub.models.descriptor import LayerDescriptor
from layerhub.models.map_config import MapConfiguration

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> tuple[dict, Path]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Tuple of (configuration dictionary, config directory path)

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file) as f:
        config = yaml.safe_load(f)

    # Return config and its directory for relative path resolution
    config_dir = config_file.parent.resolve()

    return config or {}, config_dir


def validate_config(config: dict) -> MapConfiguration:
    """
    Validate configuration using Pydantic schema validation.

    Args:
        config: Configuration dictionary

    Returns:
        Validated map configuration

    Raises:
        ValueError: If configuration is invalid
    """
    from pydantic import ValidationError

    try:
        return MapConfiguration.from_dict(config)
    except ValidationError as e:
        # Convert Pydantic errors to ValueError for consistency
        raise ValueError(f"Configuration validation failed:\n{e}") from e


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_registry_source(
    source: Union[str, list, None],
    base_dir: Optional[Path] = None,
) -> Union[str, list, None]:
    """
    Read a registry given as a local file path; URLs and lists are returned unchanged.

    Args:
        source: URL, path to a JSON/YAML file, or list of raw descriptors
        base_dir: Directory relative paths are resolved against

    Returns:
        URL or list of raw descriptors

    Raises:
        FileNotFoundError: If a local registry file doesn't exist
        ValueError: If a local registry file does not contain a list
    """
    if not isinstance(source, str) or is_url(source):
        return source

    path = Path(source)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    if not path.exists():
        raise FileNotFoundError(f"Services registry not found: {path}")

    # JSON is valid YAML
    with open(path) as f:
        services = yaml.safe_load(f)
    if not isinstance(services, list):
        raise ValueError(f"Services registry must contain a list: {path}")

    logger.info(f"Loaded {len(services)} services from {path}")
    return services


async def build_map(
    map_config: MapConfiguration,
    store: Optional[DescriptorStore] = None,
) -> tuple[MapIntegration, LoadResult]:
    """
    Create a map, wait for its registry and attach all configured layers.

    Args:
        map_config: Validated map configuration
        store: Descriptor store, a fresh one by default

    Returns:
        Tuple of (map integration, registry load result)
    """
    loaded = asyncio.get_running_loop().create_future()

    integration = create_map(
        map_config,
        store=store if store is not None else DescriptorStore(),
        callback=lambda descriptors, error: loaded.set_result(LoadResult(descriptors, error)),
    )
    result = await loaded

    # Dataset ids among the initial layers are attached in the background
    await integration.wait_pending()
    return integration, result


def run_cli(config_path: str) -> int:
    """
    Run CLI mode with config file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        logger.info(f"Loading configuration from: {config_path}")
        config, config_dir = load_config(config_path)
        map_config = validate_config(config)

        layer_conf = load_registry_source(map_config.layer_conf, config_dir)
        map_config = map_config.model_copy(update={"layer_conf": layer_conf})

        logger.info("Configuration:")
        if isinstance(layer_conf, str):
            logger.info(f"  Services: {layer_conf}")
        else:
            logger.info(f"  Services: {len(layer_conf)} inline entries")
        logger.info(f"  Initial layers: {', '.join(layer.id for layer in map_config.layers) or 'none'}")

        integration, result = asyncio.run(build_map(map_config))

        if not result.ok:
            logger.error(f"Services registry could not be loaded: {result.error}")
            return 1

        layers = integration.map.get_layers()
        logger.info(f"Map '{map_config.target}' has {len(layers)} layers:")
        for layer in layers:
            logger.info(
                f"  {layer.get('id')} - {layer.get('name')} "
                f"(visible: {layer.get_visible()}, opacity: {layer.get_opacity():.2f})"
            )

        missing = len(map_config.layers) - len(layers)
        if missing > 0:
            logger.warning(f"{missing} configured layers could not be added")

        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


def parse_match_spec(pairs: list[str]) -> dict[str, Any]:
    """
    Parse KEY=VALUE arguments into an attribute map.

    Raises:
        ValueError: If an argument has no "="
    """
    match_spec = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got: {pair}")
        match_spec[key] = value
    return match_spec


def resolve_layers(
    match_spec: dict[str, Any],
    source: Union[str, list, None] = None,
    limit: Optional[int] = None,
) -> list[LayerDescriptor]:
    """
    Resolve descriptors from a registry without building any layers.

    Args:
        match_spec: Attribute map to match
        source: Registry URL, local file or list; default registry if None
        limit: Maximum number of results

    Returns:
        Matching descriptors
    """
    registry = load_registry_source(source, Path.cwd())

    async def _resolve():
        store = DescriptorStore()
        if isinstance(registry, list):
            store.initialize(registry)
            return await store.resolve_all(match_spec)
        return await store.resolve_all(match_spec, registry)

    descriptors = asyncio.run(_resolve())
    return descriptors[:limit] if limit else descriptors
