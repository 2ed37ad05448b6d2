import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    # Logging configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_FILE = os.environ.get('LOG_FILE') or 'phono_intake.log'

    # INI file holding backend, monitor and compression settings
    # (None = config.txt inside the resolved config directory)
    CONFIG_FILE = os.environ.get('PHONO_CONFIG_FILE') or None

    # Monitor settings
    MONITOR_ENABLED = os.environ.get('MONITOR_ENABLED', 'true').lower() == 'true'
