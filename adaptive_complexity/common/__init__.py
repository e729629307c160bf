"""
Common Components for the Adaptive Complexity Engine

Shared infrastructure used by the engine modules:
1. Logging - Package logger and context adapters
2. Error Handling - Exception hierarchy and structured error info
3. Configuration - Validated engine settings and loaders
4. Serialization - Dictionary and JSON helpers
5. Locking - Per-user mutual exclusion
"""

# Initialize logging
from adaptive_complexity.common.logger import app_logger

from adaptive_complexity.common.error_handling import (
    ErrorCode, ErrorSeverity, ErrorInfo, AdaptiveComplexityError,
    ValidationError, ObservationValidationError, ConfigurationError,
    NotFoundError, ProfileNotFoundError, ConcurrentModificationError
)

from adaptive_complexity.common.config import (
    AdaptiveComplexityConfig, AppConfig, ConfigLoader, get_config, reload_config
)

from adaptive_complexity.common.locking import KeyedLockRegistry

__all__ = [
    # Logging
    'app_logger',

    # Errors
    'ErrorCode', 'ErrorSeverity', 'ErrorInfo', 'AdaptiveComplexityError',
    'ValidationError', 'ObservationValidationError', 'ConfigurationError',
    'NotFoundError', 'ProfileNotFoundError', 'ConcurrentModificationError',

    # Configuration
    'AdaptiveComplexityConfig', 'AppConfig', 'ConfigLoader', 'get_config', 'reload_config',

    # Locking
    'KeyedLockRegistry',
]
