"""
grove.config.defaults - Default configuration values
"""

CONFIG_FILENAME = ".grove.toml"
ENV_PREFIX = "GROVE_"

DEFAULT_CONFIG = {
    "app": {
        "name": "grove",
    },
    "database": {
        # Empty means $XDG_DATA_HOME/grove/graph.db
        "path": "",
        # Seconds to wait for a locked database before reporting a conflict
        "timeout": 5.0,
    },
    "display": {
        # "auto", "always" or "never"
        "color": "auto",
        # Hour at which a new day (and date node) begins
        "day_start": 0,
    },
}

COLOR_CHOICES = ("auto", "always", "never")
