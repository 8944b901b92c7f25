"""
Claim data validation against a tenant's form configuration.

``validate`` is pure: it reads the config and the payload, never mutates
either, and reports every violation instead of stopping at the first one.
Keys in the payload that no field declares are ignored so older and newer
form versions can coexist.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Mapping, Optional

from .errors import ClaimValidationError
from .form_schema import AppConfig, FieldConfig, FieldType, NUMERIC_TYPES

REQUIRED = "required"
NOT_A_NUMBER = "not_a_number"
BELOW_MIN = "below_min"
ABOVE_MAX = "above_max"
INVALID_DATE = "invalid_date"
NOT_AN_OPTION = "not_an_option"
INVALID_BOOLEAN = "invalid_boolean"
PATTERN_MISMATCH = "pattern_mismatch"

_TRUE_ALIASES = {"true", "1", "yes", "on"}
_FALSE_ALIASES = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class Violation:
    field_id: str
    reason: str


@dataclass(frozen=True)
class ValidationResult:
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def __bool__(self) -> bool:
        return self.ok


def is_empty(value: Any) -> bool:
    """Missing-value test used for required fields. ``0`` and ``False`` are values."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_date(value: Any) -> Optional[date]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_boolean(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_ALIASES:
            return True
        if lowered in _FALSE_ALIASES:
            return False
    return None


def _check_value(spec: FieldConfig, value: Any) -> Optional[str]:
    rules = spec.validation
    if spec.type in NUMERIC_TYPES:
        number = parse_number(value)
        if number is None:
            return NOT_A_NUMBER
        if rules is not None and rules.min is not None and number < rules.min:
            return BELOW_MIN
        if rules is not None and rules.max is not None and number > rules.max:
            return ABOVE_MAX
        return None
    if spec.type == FieldType.DATE:
        return None if parse_date(value) is not None else INVALID_DATE
    if spec.type == FieldType.LIST:
        return None if value in (spec.options or []) else NOT_AN_OPTION
    if spec.type == FieldType.BOOLEAN:
        return None if parse_boolean(value) is not None else INVALID_BOOLEAN
    if spec.type == FieldType.STRING and rules is not None and rules.pattern:
        if re.fullmatch(rules.pattern, str(value)) is None:
            return PATTERN_MISMATCH
    # FILE: opaque base64 blob, presence is all the core checks
    return None


def validate(config: AppConfig, payload: Mapping[str, Any]) -> ValidationResult:
    violations: List[Violation] = []
    for _, spec in config.iter_fields():
        value = payload.get(spec.id)
        if is_empty(value):
            if spec.required:
                violations.append(Violation(spec.id, REQUIRED))
            continue
        reason = _check_value(spec, value)
        if reason is not None:
            violations.append(Violation(spec.id, reason))
    return ValidationResult(violations)


def ensure_valid_claim(config: AppConfig, payload: Mapping[str, Any]) -> None:
    result = validate(config, payload)
    if not result.ok:
        raise ClaimValidationError(result.violations)


def base64_size(value: str) -> int:
    """Decoded byte length of a base64 string, data-url prefix allowed."""
    if "," in value:
        value = value.split(",", 1)[1]
    value = value.strip()
    padding = value[-2:].count("=")
    return max(0, len(value) * 3 // 4 - padding)


def oversized_file_fields(config: AppConfig, payload: Mapping[str, Any], limit: int) -> List[str]:
    """FILE field ids whose payload exceeds ``limit`` bytes. Enforced by the upload path, not ``validate``."""
    oversized = []
    for _, spec in config.iter_fields():
        value = payload.get(spec.id)
        if spec.type == FieldType.FILE and isinstance(value, str) and base64_size(value) > limit:
            oversized.append(spec.id)
    return oversized
