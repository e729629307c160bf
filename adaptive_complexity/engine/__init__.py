"""
Adaptive Complexity Engine Components

1. Levels and Models - Complexity tiers, observations, profiles and content
2. Scoring and Recommendation - Performance score, level and confidence
3. Learning Rate - Smoothed improvement-rate trait
4. Content Adaptation - Variant selection for the recommended level
5. Adjustments - Audit records of level changes
6. Service - Stateless engine facade and per-user profile service
"""

from adaptive_complexity.engine.levels import (
    ComplexityLevel, MIN_LEVEL, MAX_LEVEL, DEFAULT_LEVEL, nearest_level
)

from adaptive_complexity.engine.models import (
    PerformanceObservation, SkillAreaProfile, SubjectPreference, LearningProfile,
    AdaptiveElement, AdaptiveContent, ComplexityAdjustmentResult,
    ContentType, ElementType
)

from adaptive_complexity.engine.validation import validate_observation, observation_from_payload
from adaptive_complexity.engine.scoring import calculate_performance_score
from adaptive_complexity.engine.recommender import (
    AdjustmentDirection, LevelRecommendation, recommend, recalculate
)
from adaptive_complexity.engine.learning_rate import LearningRateCategory, estimate_learning_rate
from adaptive_complexity.engine.content import adapt_content, determine_complexity_level
from adaptive_complexity.engine.adjustments import AdjustmentLog, record_adjustment
from adaptive_complexity.engine.repository import ProfileRepository, InMemoryProfileRepository
from adaptive_complexity.engine.service import AdaptiveComplexityEngine, LearningProfileService

__all__ = [
    # Levels and models
    'ComplexityLevel', 'MIN_LEVEL', 'MAX_LEVEL', 'DEFAULT_LEVEL', 'nearest_level',
    'PerformanceObservation', 'SkillAreaProfile', 'SubjectPreference', 'LearningProfile',
    'AdaptiveElement', 'AdaptiveContent', 'ComplexityAdjustmentResult',
    'ContentType', 'ElementType',

    # Components
    'validate_observation', 'observation_from_payload',
    'calculate_performance_score',
    'AdjustmentDirection', 'LevelRecommendation', 'recommend', 'recalculate',
    'LearningRateCategory', 'estimate_learning_rate',
    'adapt_content', 'determine_complexity_level',
    'AdjustmentLog', 'record_adjustment',

    # Storage and services
    'ProfileRepository', 'InMemoryProfileRepository',
    'AdaptiveComplexityEngine', 'LearningProfileService',
]
