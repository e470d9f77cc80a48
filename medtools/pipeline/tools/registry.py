"""
Declarative tool definitions.

A ``ToolSpec`` holds everything the generic runner and the HTTP layer need
to know about a tool: input limits, preference defaults, prompts, sampling
parameters and the expected result schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from medtools.pipeline.core.config import (
    HARD_DEFAULT_TEXT_MODEL,
    PAPER_MAX_CHARS,
    QUERY_MAX_CHARS,
    REPORT_MAX_CHARS,
    TRANSCRIPT_MAX_CHARS,
)
from medtools.pipeline.models.results import (
    ArticleSummary,
    DifferentialDiagnosis,
    DischargePaper,
    ProblemIdeaEvidence,
    RadiologyReport,
    SoapNote,
    ThreePassSummary,
    WebSummary,
)
from medtools.pipeline.processors.schema_validator import ResultSchema
from medtools.pipeline.tools import prompts

TEXT_MODELS = {
    "gemma3:1b": "Gemma 3 (1B)",
    "qwen2.5:1.5b": "Qwen 2.5 (1.5B)",
    "qwen3:1.7b": "Qwen 3 (1.7B)",
}

VISION_MODELS = {
    "gemma3:4b": "Gemma 3 (4B)",
    "moondream:1.8b": "Moondream (1.8B)",
}

CLINICAL_MODELS = {
    "medgemma:4b": "MedGemma (4B)",
}

OUTPUT_FORMATS = {
    "json": "JSON",
    "yaml": "YAML",
    "xml": "XML",
    "markdown": "Markdown",
}

PAPER_PROMPTS = {
    "three_pass": "Three-Pass Summary",
    "problem_idea_evidence": "Problem-Idea-Evidence",
}

PERSONALITIES = {
    "medical_assistant": "Medical Assistant",
    "general_practitioner": "General Practitioner",
    "specialist": "Medical Specialist",
    "medical_researcher": "Medical Researcher",
    "skippy": "Skippy the Magnificent",
}


# =============================================================================
# Tool specification
# =============================================================================


@dataclass(frozen=True)
class ToolOption:
    """A tool-specific preference such as an output format or prompt type."""

    name: str
    cookie: str
    label: str
    choices: Mapping[str, str]
    default: str


@dataclass(frozen=True)
class ToolSpec:
    name: str
    title: str
    description: str
    default_language: str
    input_field: str = "report"
    input_label: str = "Report"
    input_kind: str = "text"  # text | url | query | upload | message
    file_field: Optional[str] = None  # optional document upload next to the text input
    max_chars: int = REPORT_MAX_CHARS
    too_long_message: str = "The report is too long. Maximum 10000 characters allowed."
    empty_message: str = "The report cannot be empty."
    allow_get: bool = True
    cors: bool = False
    cookie_prefix: Optional[str] = None
    fallback_models: Mapping[str, str] = field(default_factory=lambda: dict(TEXT_MODELS))
    model_filter: Optional[str] = None
    default_model: Optional[str] = None
    hard_default_model: str = HARD_DEFAULT_TEXT_MODEL
    vision: bool = False
    system_prompt: Optional[Callable[..., str]] = None
    user_prefix: str = ""
    schema: Optional[ResultSchema] = None
    option_schemas: Mapping[str, ResultSchema] = field(default_factory=dict)
    option_prompts: Mapping[str, Callable[[str], str]] = field(default_factory=dict)
    response_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    options: tuple[ToolOption, ...] = ()

    @property
    def cookies(self) -> str:
        return self.cookie_prefix or self.name

    @property
    def path(self) -> str:
        return f"/{self.name}"

    def schema_for(self, options: Mapping[str, str]) -> Optional[ResultSchema]:
        if self.option_schemas and self.options:
            return self.option_schemas[options[self.options[0].name]]
        return self.schema

    def prompt_for(self, language: str, options: Mapping[str, str]) -> str:
        if self.option_prompts and self.options:
            return self.option_prompts[options[self.options[0].name]](language)
        if self.system_prompt is None:
            raise ValueError(f"Tool {self.name} has no system prompt")
        return self.system_prompt(language)


_URL_ERRORS = {
    "too_long_message": "The URL is too long.",
    "empty_message": "Invalid URL format. Please enter a valid URL including http:// or https://",
}

TOOLS: dict[str, ToolSpec] = {
    tool.name: tool
    for tool in (
        ToolSpec(
            name="rra",
            title="Radiology Report Analyzer",
            description="Classify a radiology report as pathologic and rate its severity.",
            default_language="ro",
            allow_get=False,
            system_prompt=prompts.radiology_report_prompt,
            user_prefix="REPORT TO ANALYZE:\n",
            schema=RadiologyReport,
            temperature=0.1,
            max_tokens=150,
        ),
        ToolSpec(
            name="dpa",
            title="Discharge Paper Analyzer",
            description="Summarize a discharge paper for radiology use.",
            default_language="ro",
            system_prompt=prompts.discharge_paper_prompt,
            user_prefix="DISCHARGE PAPER TO ANALYZE:\n",
            schema=DischargePaper,
            temperature=0.1,
            max_tokens=300,
        ),
        ToolSpec(
            name="rdd",
            title="Radiology Differential Diagnosis",
            description="Ranked differential diagnoses for a radiology report.",
            default_language="en",
            cors=True,
            system_prompt=prompts.differential_diagnosis_prompt,
            user_prefix="RADIOLOGY REPORT TO ANALYZE:\n",
            schema=DifferentialDiagnosis,
            temperature=0.1,
            max_tokens=1200,
        ),
        ToolSpec(
            name="pec",
            title="Patient Education Content",
            description="Rewrite medical text in patient-friendly language.",
            default_language="en",
            input_field="content",
            input_label="Medical content",
            too_long_message="The content is too long. Maximum 10000 characters allowed.",
            empty_message="The content cannot be empty.",
            cors=True,
            system_prompt=prompts.patient_education_prompt,
            user_prefix="MEDICAL CONTENT TO SIMPLIFY:\n",
            response_key="education",
        ),
        ToolSpec(
            name="sum",
            title="Web Page Summarizer",
            description="Structured summary of the main content of a web page.",
            default_language="en",
            input_field="url",
            input_label="URL",
            input_kind="url",
            system_prompt=prompts.web_summary_prompt,
            schema=WebSummary,
            temperature=0.3,
            max_tokens=1000,
            **_URL_ERRORS,
        ),
        ToolSpec(
            name="wps",
            title="Web Page Summary",
            description="Structured summary of a web page, Romanian by default.",
            default_language="ro",
            input_field="url",
            input_label="URL",
            input_kind="url",
            cookie_prefix="sum",
            system_prompt=prompts.web_summary_prompt,
            schema=WebSummary,
            temperature=0.3,
            max_tokens=1000,
            **_URL_ERRORS,
        ),
        ToolSpec(
            name="scp",
            title="Simple Content Parser",
            description="Convert the main content of a web page to Markdown.",
            default_language="en",
            input_field="url",
            input_label="URL",
            input_kind="url",
            allow_get=False,
            system_prompt=prompts.content_parser_prompt,
            response_key="markdown",
            temperature=0.1,
            max_tokens=4000,
            **_URL_ERRORS,
        ),
        ToolSpec(
            name="ocr",
            title="Image OCR",
            description="Extract text from an image or scanned PDF with a vision model.",
            default_language="ro",
            input_field="image",
            input_label="Image or PDF",
            input_kind="upload",
            allow_get=False,
            fallback_models=VISION_MODELS,
            hard_default_model="gemma3:4b",
            vision=True,
            system_prompt=prompts.ocr_prompt,
            response_key="text",
            temperature=0.1,
            max_tokens=2048,
        ),
        ToolSpec(
            name="soap",
            title="SOAP Note Generator",
            description="Turn a clinical transcript into a SOAP note.",
            default_language="en",
            input_field="content",
            input_label="Transcript",
            file_field="file",
            max_chars=TRANSCRIPT_MAX_CHARS,
            too_long_message="The content is too long. Maximum 1,000,000 characters allowed.",
            empty_message="No content provided. Please enter text or upload a file.",
            cors=True,
            fallback_models=CLINICAL_MODELS,
            model_filter="medgemma|meditron",
            default_model="medgemma:4b",
            hard_default_model="medgemma:4b",
            system_prompt=prompts.soap_note_prompt,
            user_prefix="MEDICAL TRANSCRIPT TO CONVERT TO SOAP FORMAT:\n",
            schema=SoapNote,
        ),
        ToolSpec(
            name="sde",
            title="Structured Data Extractor",
            description="Extract structured data from text, documents or images.",
            default_language="en",
            input_field="data",
            input_label="Data",
            file_field="file",
            too_long_message="The data is too long. Maximum 10000 characters allowed.",
            empty_message="The data cannot be empty unless you upload an image.",
            cors=True,
            options=(
                ToolOption("output_format", "output-format", "Output format", OUTPUT_FORMATS, "json"),
            ),
        ),
        ToolSpec(
            name="stp",
            title="Summarize This Paper",
            description="Structured summary of a research paper.",
            default_language="en",
            input_field="content",
            input_label="Paper",
            file_field="file",
            max_chars=PAPER_MAX_CHARS,
            too_long_message="The content is too long. Maximum 50000 characters allowed.",
            empty_message="The content cannot be empty.",
            cors=True,
            user_prefix="RESEARCH PAPER TO ANALYZE:\n",
            option_prompts={
                "three_pass": prompts.three_pass_prompt,
                "problem_idea_evidence": prompts.problem_idea_evidence_prompt,
            },
            option_schemas={
                "three_pass": ThreePassSummary,
                "problem_idea_evidence": ProblemIdeaEvidence,
            },
            options=(ToolOption("prompt_type", "prompt", "Prompt", PAPER_PROMPTS, "three_pass"),),
        ),
        ToolSpec(
            name="exp",
            title="Experiment",
            description="Run a free or library prompt against text, a document or an image.",
            default_language="en",
            input_field="prompt",
            input_label="Prompt",
            file_field="file",
            too_long_message=(
                "The prompt (including file content) is too long. Maximum 10000 characters allowed."
            ),
            empty_message="The prompt cannot be empty unless you upload an image.",
            cors=True,
            response_key="result",
            # Choices are loaded from the prompt library at request time.
            options=(ToolOption("prompt_type", "prompt-type", "Predefined prompt", {}, ""),),
        ),
        ToolSpec(
            name="sml",
            title="Medical Literature Search",
            description="Search PubMed and summarize the top articles.",
            default_language="en",
            input_field="query",
            input_label="Search query",
            input_kind="query",
            max_chars=QUERY_MAX_CHARS,
            too_long_message="The search query is too long. Maximum 500 characters allowed.",
            empty_message="The search query cannot be empty.",
            cors=True,
            system_prompt=prompts.literature_summary_prompt,
            user_prefix="RESEARCH PAPER TO SUMMARIZE:\n",
            schema=ArticleSummary,
        ),
        ToolSpec(
            name="chat",
            title="Medical Chat",
            description="Conversational medical assistant with selectable personality.",
            default_language="en",
            input_field="message",
            input_label="Message",
            input_kind="message",
            too_long_message="The message is too long. Maximum 10000 characters allowed.",
            empty_message="The message cannot be empty.",
            allow_get=False,
            temperature=0.7,
            options=(
                ToolOption(
                    "personality", "personality", "AI personality", PERSONALITIES, "medical_assistant"
                ),
            ),
        ),
    )
}


def get_tool(name: str) -> ToolSpec:
    return TOOLS[name]
