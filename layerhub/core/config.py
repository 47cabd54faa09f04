"""Configuration for service registry access and layer resolution."""

# Services registry
DEFAULT_SERVICES_URL = "https://geoportal-hamburg.de/lgv-config/services-internet.json"

# Download settings
REQUEST_TIMEOUT = 30  # seconds
MAX_RETRIES = 3
RETRY_DELAY = 1  # seconds

# Only descriptors of this type are matched through their datasets
DATASET_LAYER_TYPE = "WMS"
DATASET_ID_KEY = "md_id"

# Layer builder defaults
WFS_VERSION = "1.1.0"
WMS_DEFAULT_FORMAT = "image/png"
WMS_DEFAULT_VERSION = "1.3.0"

# Layer state defaults
DEFAULT_VISIBILITY = True
DEFAULT_TRANSPARENCY = 0  # percent
