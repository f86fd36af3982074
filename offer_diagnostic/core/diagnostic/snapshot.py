"""Versioned snapshot document for persisting an evaluation."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from offer_diagnostic.core.diagnostic.types import EvaluationResult, OfferConfiguration

SCHEMA_VERSION = 1


class DiagnosticSnapshot(BaseModel):
    """An evaluation together with the configuration that produced it."""

    schema_version: int = Field(default=SCHEMA_VERSION, description="Snapshot document version")
    rule_set_version: str
    configuration: OfferConfiguration
    result: EvaluationResult
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: int) -> int:
        if v != SCHEMA_VERSION:
            raise ValueError(f"Unsupported snapshot schema_version {v}, expected {SCHEMA_VERSION}")
        return v

    @classmethod
    def capture(cls, configuration: OfferConfiguration, result: EvaluationResult) -> "DiagnosticSnapshot":
        return cls(
            rule_set_version=result.rule_set_version,
            configuration=configuration,
            result=result,
        )

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str | bytes) -> "DiagnosticSnapshot":
        return cls.model_validate_json(data)
