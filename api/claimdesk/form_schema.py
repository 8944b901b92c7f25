"""
Tenant claim-form definition.

An ``AppConfig`` holds an ordered list of steps, each with an ordered list of
typed fields. The admin console and the widget both render the claim wizard
from it, and the claim validator checks submitted ``data`` against it.

The serialized form uses camelCase keys (``abTest``, ``claimForm``,
``fileUploadMethod``); that is what gets stored per tenant and returned to
the clients.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigValidationError


class FieldType(str, Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    AMOUNT = "AMOUNT"
    DATE = "DATE"
    BOOLEAN = "BOOLEAN"
    FILE = "FILE"
    LIST = "LIST"


NUMERIC_TYPES = (FieldType.NUMBER, FieldType.AMOUNT)


class FileUploadMethod(str, Enum):
    DRAG_DROP = "drag-drop"
    DIALOG = "dialog"


class _SchemaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FieldValidation(_SchemaModel):
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None


class FieldConfig(_SchemaModel):
    id: str
    type: FieldType
    label: str
    required: bool = False
    placeholder: Optional[str] = None
    options: Optional[List[str]] = None
    order: Optional[int] = None
    validation: Optional[FieldValidation] = None


class StepConfig(_SchemaModel):
    id: str
    title: str
    description: Optional[str] = None
    order: Optional[int] = None
    fields: List[FieldConfig] = Field(default_factory=list)

    def ordered_fields(self) -> List[FieldConfig]:
        return _in_wizard_order(self.fields)


class ABTest(_SchemaModel):
    file_upload_method: FileUploadMethod = Field(default=FileUploadMethod.DRAG_DROP, alias="fileUploadMethod")


class ClaimForm(_SchemaModel):
    steps: List[StepConfig] = Field(default_factory=list)


class AppConfig(_SchemaModel):
    version: str = "1.0.0"
    color: str = "teal"
    ab_test: ABTest = Field(default_factory=ABTest, alias="abTest")
    claim_form: ClaimForm = Field(default_factory=ClaimForm, alias="claimForm")

    @property
    def steps(self) -> List[StepConfig]:
        return self.claim_form.steps

    def ordered_steps(self) -> List[StepConfig]:
        return _in_wizard_order(self.claim_form.steps)

    def iter_fields(self) -> Iterator[Tuple[StepConfig, FieldConfig]]:
        for step in self.claim_form.steps:
            for field in step.fields:
                yield step, field

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _in_wizard_order(items):
    # explicit order wins; unordered items keep their list position
    indexed = list(enumerate(items))
    indexed.sort(key=lambda pair: (pair[1].order if pair[1].order is not None else pair[0], pair[0]))
    return [item for _, item in indexed]


def default_app_config() -> AppConfig:
    return AppConfig()


@dataclass(frozen=True)
class ConfigViolation:
    path: str
    reason: str


def check_config(config: AppConfig) -> List[ConfigViolation]:
    """Return every structural problem in ``config``; an empty list means well-formed."""
    violations: List[ConfigViolation] = []
    seen_steps = set()
    for s_idx, step in enumerate(config.claim_form.steps):
        step_path = f"claimForm.steps[{s_idx}]"
        if step.id in seen_steps:
            violations.append(ConfigViolation(f"{step_path}.id", f"duplicate step id '{step.id}'"))
        seen_steps.add(step.id)

        seen_fields = set()
        for f_idx, field in enumerate(step.fields):
            field_path = f"{step_path}.fields[{f_idx}]"
            if field.id in seen_fields:
                violations.append(
                    ConfigViolation(f"{field_path}.id", f"duplicate field id '{field.id}' in step '{step.id}'")
                )
            seen_fields.add(field.id)

            if field.type == FieldType.LIST and not field.options:
                violations.append(ConfigViolation(f"{field_path}.options", "LIST field requires at least one option"))

            rules = field.validation
            if rules is None:
                continue
            if (
                field.type in NUMERIC_TYPES
                and rules.min is not None
                and rules.max is not None
                and rules.min > rules.max
            ):
                violations.append(
                    ConfigViolation(f"{field_path}.validation", f"min {rules.min:g} is greater than max {rules.max:g}")
                )
            if rules.pattern is not None:
                try:
                    re.compile(rules.pattern)
                except re.error as exc:
                    violations.append(ConfigViolation(f"{field_path}.validation.pattern", f"invalid pattern: {exc}"))
    return violations


def ensure_valid_config(config: AppConfig) -> AppConfig:
    violations = check_config(config)
    if violations:
        raise ConfigValidationError(violations)
    return config
