"""Default settings for component-tree-engine.

Maps to keys in config.example.yaml. Override via config.local.yaml.
"""

from pathlib import Path

from platformdirs import user_config_dir

# Platform-appropriate directories (resolved by platformdirs)
config_dir = Path(user_config_dir("component-tree-engine"))
user_definitions_dir = config_dir / "definitions"

# Server defaults
server_host = "127.0.0.1"
server_port = 9848

# Resolution defaults
resolution_max_depth = 32
resolution_trace_level = "errors"
