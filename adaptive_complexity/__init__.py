"""
Adaptive Complexity Engine

Recommends which complexity level of learning content each learner should see
next, based on a rolling history of performance observations.
"""

__version__ = "1.0.0"

from adaptive_complexity.common import (
    AdaptiveComplexityConfig, AdaptiveComplexityError, ConcurrentModificationError,
    ConfigurationError, ObservationValidationError, ProfileNotFoundError,
    get_config, reload_config
)

from adaptive_complexity.engine import (
    ComplexityLevel, PerformanceObservation, SkillAreaProfile, SubjectPreference,
    LearningProfile, AdaptiveElement, AdaptiveContent, ComplexityAdjustmentResult,
    ContentType, ElementType, LevelRecommendation, AdjustmentLog,
    AdaptiveComplexityEngine, LearningProfileService,
    ProfileRepository, InMemoryProfileRepository
)

__all__ = [
    'AdaptiveComplexityConfig', 'AdaptiveComplexityError', 'ConcurrentModificationError',
    'ConfigurationError', 'ObservationValidationError', 'ProfileNotFoundError',
    'get_config', 'reload_config',
    'ComplexityLevel', 'PerformanceObservation', 'SkillAreaProfile', 'SubjectPreference',
    'LearningProfile', 'AdaptiveElement', 'AdaptiveContent', 'ComplexityAdjustmentResult',
    'ContentType', 'ElementType', 'LevelRecommendation', 'AdjustmentLog',
    'AdaptiveComplexityEngine', 'LearningProfileService',
    'ProfileRepository', 'InMemoryProfileRepository',
]
