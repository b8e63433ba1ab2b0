from __future__ import annotations
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

KeywordCase = Literal["upper", "lower", "preserve"]


class FormatOptions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # casing of recognized keywords
    keyword_case: KeywordCase = Field(default="upper", alias="keywordCase")
    # cap on consecutive blank lines kept in the output
    lines_between_queries: int = Field(default=1, ge=0, alias="linesBetweenQueries")
    # advisory only, the formatter never wraps
    max_line_length: int = Field(default=80, gt=0, alias="maxLineLength")
    # indent unit
    tab_size: int = Field(default=2, gt=0, alias="tabSize")
    use_tabs: bool = Field(default=False, alias="useTabs")

    @field_validator("keyword_case", mode="before")
    @classmethod
    def lower_case_choice(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def indent_unit(self) -> str:
        return "\t" if self.use_tabs else " " * self.tab_size


def coerce_options(options: Union[FormatOptions, Mapping[str, Any], None]) -> FormatOptions:
    if options is None:
        return FormatOptions()
    if isinstance(options, FormatOptions):
        return options
    return FormatOptions.model_validate(dict(options))


class ColumnDefinition(BaseModel):
    """Column descriptor handed over by the schema browser / structure editor."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "TEXT"
    nullable: bool = True
    default: Optional[str] = None
    pk: bool = False
    length: Optional[int] = Field(default=None, gt=0)
    scale: Optional[int] = Field(default=None, ge=0)
    references_table: Optional[str] = None
    references_column: Optional[str] = None

    @field_validator("default", mode="before")
    @classmethod
    def default_as_text(cls, v: Any) -> Any:
        # sheets and JSON hand over numeric defaults
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v
