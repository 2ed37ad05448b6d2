"""
Module Name: path_resolver.py
Description:
    Resolves the worker's directories (config, data, incoming, intake, logs)
    for Docker and bare metal installs.

Location:
    /utils/path_resolver.py
"""

import os
from typing import Dict, NamedTuple, Optional

from utils.logger import get_module_logger

_LOGGER = get_module_logger("Utils.PathResolver")

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class DirectorySpec(NamedTuple):
    env_var: str
    docker_path: str
    bare_metal_path: str


# incoming: local mount of the qBittorrent downloads root
# intake: where finished audio files are moved for compression and import
DIRECTORIES: Dict[str, DirectorySpec] = {
    'config': DirectorySpec('PHONO_CONFIG_DIR', '/config', 'config'),
    'data': DirectorySpec('PHONO_DATA_DIR', '/app/data', 'data'),
    'incoming': DirectorySpec('PHONO_INCOMING_DIR', '/app/incoming', 'incoming'),
    'intake': DirectorySpec('PHONO_INTAKE_DIR', '/app/intake', 'intake'),
    'logs': DirectorySpec('PHONO_LOGS_DIR', '/app/logs', 'logs'),
}


class PathResolver:
    """
    Resolves directories in priority order:
    1. PHONO_<NAME>_DIR environment override (relative values are taken from the project root)
    2. the container path when running under Docker
    3. a directory under the project root
    """

    def __init__(self):
        self._is_docker = self._detect_docker()
        _LOGGER.debug(f"Path resolver using {'Docker' if self._is_docker else 'bare metal'} layout")

    @staticmethod
    def _detect_docker() -> bool:
        return bool(os.getenv('DOCKER_CONTAINER')) or os.path.exists('/.dockerenv')

    def resolve(self, name: str, create_if_missing: bool = True) -> str:
        """Return the absolute path of a named directory, creating it by default."""
        try:
            entry = DIRECTORIES[name]
        except KeyError:
            raise ValueError(f"Unknown directory name: {name}") from None

        override = os.getenv(entry.env_var)
        if override:
            path = override if os.path.isabs(override) else os.path.normpath(os.path.join(PROJECT_ROOT, override))
        elif self._is_docker:
            path = entry.docker_path
        else:
            path = os.path.join(PROJECT_ROOT, entry.bare_metal_path)

        if create_if_missing:
            os.makedirs(path, exist_ok=True)
        return path

    def get_config_dir(self) -> str:
        return self.resolve('config')

    def get_data_dir(self) -> str:
        return self.resolve('data')

    def get_incoming_dir(self) -> str:
        return self.resolve('incoming')

    def get_intake_dir(self) -> str:
        return self.resolve('intake')

    def get_logs_dir(self) -> str:
        return self.resolve('logs')

    def is_docker(self) -> bool:
        return self._is_docker


_path_resolver: Optional[PathResolver] = None


def get_path_resolver() -> PathResolver:
    """Get or create the global PathResolver instance."""
    global _path_resolver
    if _path_resolver is None:
        _path_resolver = PathResolver()
    return _path_resolver


def reset_path_resolver() -> None:
    """Forget the cached resolver so environment changes are picked up."""
    global _path_resolver
    _path_resolver = None
