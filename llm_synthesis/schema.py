"""Canonical structured output schema for generated use cases."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Priority = Literal["High", "Medium", "Low"]


class UseCase(BaseModel):
    """One business use case returned by the language model.

    Field names are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    business_impact: str = Field(min_length=1, alias="businessImpact")
    priority: Priority
    data_patterns: Optional[Union[str, List[str]]] = Field(default=None, alias="dataPatterns")
    mermaid_diagram: str = Field(default="", alias="mermaidDiagram")

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().capitalize()
        return value
