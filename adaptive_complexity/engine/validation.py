"""
Observation Validation

Observations are checked at the boundary before they enter the performance
store. Out-of-range values are rejected rather than clamped so that bad
upstream data stays visible.
"""

import datetime
import math
from dataclasses import fields
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from adaptive_complexity.common.error_handling import ObservationValidationError
from adaptive_complexity.common.logger import app_logger
from adaptive_complexity.engine.models import PerformanceObservation

# Module logger
logger = app_logger.getChild("engine.validation")


class ObservationSchema(BaseModel):
    """Validation rules for a performance observation."""
    model_config = ConfigDict(extra="forbid")

    user_id: str = Field(min_length=1)
    content_id: str = Field(min_length=1)
    subject_area: str = Field(min_length=1)
    skill_area: str = Field(min_length=1)
    score: float = Field(ge=0.0, le=1.0)
    time_spent: float = Field(ge=0.0)
    completion_rate: float = Field(ge=0.0, le=1.0)
    attempts: int = Field(ge=1)
    timestamp: datetime.datetime

    @field_validator('score', 'time_spent', 'completion_rate')
    @classmethod
    def validate_finite(cls, v: float) -> float:
        """Reject NaN and infinite values"""
        if not math.isfinite(v):
            raise ValueError("value must be a finite number")
        return v

    @field_validator('attempts', mode='before')
    @classmethod
    def validate_whole_attempts(cls, v: Any) -> Any:
        """Reject booleans and fractional attempt counts"""
        if isinstance(v, bool):
            raise ValueError("attempts must be an integer")
        if isinstance(v, float) and not v.is_integer():
            raise ValueError("attempts must be a whole number")
        return v


def _format_errors(error: ValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in item["loc"]) or "__root__",
            "message": item["msg"],
            "type": item["type"]
        }
        for item in error.errors(include_url=False)
    ]


def validate_observation(observation: PerformanceObservation) -> PerformanceObservation:
    """
    Validate an observation before it is stored.

    Args:
        observation: Observation to check

    Returns:
        The same observation, unchanged

    Raises:
        ObservationValidationError: If any field is missing or out of range
    """
    try:
        values = {item.name: getattr(observation, item.name) for item in fields(observation)}
        ObservationSchema.model_validate(values, strict=True)
    except ValidationError as e:
        errors = _format_errors(e)
        logger.warning(
            f"Rejected observation for user {observation.user_id!r} "
            f"content {observation.content_id!r}: {errors}"
        )
        raise ObservationValidationError(
            errors,
            cause=e,
            context={"user_id": observation.user_id, "content_id": observation.content_id}
        ) from e
    return observation


def observation_from_payload(payload: Dict[str, Any]) -> PerformanceObservation:
    """
    Build a validated observation from an untyped mapping.

    Raises:
        ObservationValidationError: If the payload does not describe a valid observation
    """
    try:
        schema = ObservationSchema(**payload)
    except ValidationError as e:
        errors = _format_errors(e)
        logger.warning(f"Rejected observation payload: {errors}")
        raise ObservationValidationError(errors, cause=e) from e
    return PerformanceObservation(**schema.model_dump())
