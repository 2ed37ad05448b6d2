# Services package for the Phono intake worker
# Modular structure - each concern lives in its own subdirectory

from .config import ConfigService
from .database import DatabaseService

# Import service manager
from .service_manager import ServiceManager, service_manager

__all__ = [
    # Core services
    'ConfigService',
    'DatabaseService',

    # Service manager
    'ServiceManager',
    'service_manager'
]
