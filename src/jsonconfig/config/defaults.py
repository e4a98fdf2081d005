"""
Default settings for jsonconfig itself.
"""

DEFAULT_SETTINGS = {
    "version": "1.0.0",
    "files": {
        # Backing file candidates for a scope named N: N.conf, N.json, ...
        "user_config_endings": [".conf", ".json", ".conf.json", ".json.conf"],
        # Bundled resources supplying the default layer (matched case-insensitively)
        "default_resource_endings": [
            "default.conf",
            "default.json",
            "default.conf.json",
            "default.json.conf",
        ],
        # Backing file name for the global scope
        "global_config_name": "settings",
        "encoding": "utf-8",
        "indent": 2,
    },
    "watch": {
        "enabled": True,
        # Seconds to wait for the observer thread when a store is closed
        "join_timeout": 2.0,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "console_enabled": True,
        "file_enabled": False,
        "file_path": "jsonconfig.log",
    },
}
