"""
Typed contracts for the JSON results the tools ask the model for.

Unknown keys are ignored, absent optional fields are left out of the dump,
and lists longer than their cap keep only their first items.
"""

from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
)
from pydantic_core import PydanticCustomError


def _not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("blank_string", "Value must not be blank")
    return value


def _number_only(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError("number_type", "Input should be a number")
    return value


def keep_first(limit: int) -> Callable[[Any], Any]:
    def truncate(value: Any) -> Any:
        return value[:limit] if isinstance(value, list) else value

    return truncate


def score(minimum: int, maximum: int) -> Any:
    """Number within an inclusive range."""
    return Annotated[
        Union[StrictInt, StrictFloat],
        BeforeValidator(_number_only),
        Field(ge=minimum, le=maximum),
    ]


def text_list(min_items: int = 0, max_items: Optional[int] = None) -> Any:
    """List of non-blank strings, cut to ``max_items`` before the length check."""
    if max_items is None:
        return Annotated[list[Text], Field(min_length=min_items)]
    return Annotated[
        list[Text], Field(min_length=min_items), BeforeValidator(keep_first(max_items))
    ]


Text = Annotated[StrictStr, AfterValidator(_not_blank)]
YesNo = Literal["yes", "no"]
Severity = score(0, 10)
Probability = score(0, 100)
Keywords = text_list(1, 3)
KeyPoints = text_list(3, 5)
KeyFindings = text_list(1, 3)
SupportingFeatures = text_list(1)
TextItems = text_list()


class ResultModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RadiologyReport(ResultModel):
    """Result of the radiology report analyzer."""

    pathologic: YesNo
    severity: Severity
    diagnostic: Text


class DischargePaper(ResultModel):
    """Result of the discharge paper analyzer."""

    pathologic: YesNo
    severity: Severity
    summary: Text
    keywords: Keywords


class Diagnosis(ResultModel):
    condition: Text
    probability: Probability
    description: Text
    supporting_features: SupportingFeatures
    references: Optional[list[Text]] = None


class DifferentialDiagnosis(ResultModel):
    """Ranked differential diagnoses for a radiology report."""

    diagnoses: Annotated[list[Diagnosis], Field(min_length=1)]


class WebSummary(ResultModel):
    title: Text
    summary: Text
    key_points: KeyPoints
    keywords: Keywords


class OcrSummary(ResultModel):
    summary: Text


class SoapNote(ResultModel):
    subjective: TextItems
    objective: TextItems
    assessment: TextItems
    plan: TextItems


class ThreePassSummary(ResultModel):
    pass1: Text
    pass2: Text
    pass3: Text


class ProblemIdeaEvidence(ResultModel):
    problem: Text
    idea: Text
    evidence: Text
    results: Text


class ArticleSummary(ResultModel):
    """Model-written part of a literature result; bibliography comes from PubMed."""

    summary: Text
    key_findings: KeyFindings
    methodology: Optional[Text] = None
