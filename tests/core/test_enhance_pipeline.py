from __future__ import annotations

import io
import json

import pytest
from docx import Document
from docx.shared import RGBColor

from services.enhancer.enhance_core import (
    AIServiceError,
    EmptySourceError,
    InvalidInputError,
    build_document,
    career_chat,
    enhance_resume,
    generate_roadmap,
    prepare_request,
    render,
)
from services.enhancer.enhance_core.assembler import DOCX_CONTENT_TYPE


_SOURCE_TEXT = (
    "Jane Doe\nData Analyst with 3 years of experience at Acme Retail.\n"
    "Skills: Python, SQL\nEducation: B.Tech, VIT Pune, 2020. 8.7 CGPA, Honors in AI (2020), 9.1 SGPA\n"
)


class _FakeLLMResponse:
    def __init__(self, content: str) -> None:
        self.content = content


class _FakeProvider:
    def __init__(self, outputs: list[object]) -> None:
        self._outputs = list(outputs)
        self.prompts: list[str] = []
        self.max_tokens: list[int | None] = []

    def generate(self, prompt: str, max_tokens: int | None = None) -> _FakeLLMResponse:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if not self._outputs:
            raise RuntimeError("no_more_outputs")
        next_item = self._outputs.pop(0)
        if isinstance(next_item, Exception):
            raise next_item
        return _FakeLLMResponse(str(next_item))


def _model_output(**overrides) -> str:
    payload = {
        "personalInfo": {"name": "Jane Doe", "linkedin": ""},
        "professionalSummary": "Data analyst focused on retail reporting.",
        "coreSkills": ["Python", "SQL", "Kubernetes"],
        "experience": [{"company": "Acme Retail", "position": "Data Analyst"}],
        "education": [
            {
                "degree": "B.Tech",
                "institution": "VIT Pune",
                "year": "2020",
                "details": "8.7 CGPA, Honors in AI (2020), 9.1 SGPA",
            }
        ],
        "projects": [],
        "certifications": [],
        "additionalSections": {},
    }
    payload.update(overrides)
    return json.dumps(payload)


def _skill_items(blocks):
    (line,) = [block for block in blocks if block.section == "skills" and block.kind.value == "paragraph"]
    return line.runs[1:]


def test_scenario_added_skill_is_highlighted() -> None:
    provider = _FakeProvider([_model_output()])
    request = prepare_request("Data Analyst", _SOURCE_TEXT)

    blocks = render(build_document(request, provider), request.target_role)

    items = _skill_items(blocks)
    assert [run.text.rstrip(", ") for run in items] == ["Python, SQL", "Kubernetes"]
    assert [run.is_added for run in items] == [False, True]


def test_scenario_unsourced_profile_link_is_dropped() -> None:
    output = _model_output(
        personalInfo={"name": "Jane Doe", "linkedin": "https://linkedin.com/in/jane-doe"}
    )
    provider = _FakeProvider([output])
    request = prepare_request("Data Analyst", _SOURCE_TEXT)

    document = build_document(request, provider)
    blocks = render(document, request.target_role)

    assert request.source.allowed_urls == frozenset()
    assert document.identity.linkedin.text == ""
    assert [block for block in blocks if block.section == "links"] == []


def test_scenario_short_source_fails_before_model_call() -> None:
    provider = _FakeProvider([_model_output()])

    with pytest.raises(EmptySourceError):
        enhance_resume("Data Analyst", "Jane Doe\nPython SQL analyst 24", provider)

    assert provider.prompts == []


def test_enhance_resume_produces_coloured_docx() -> None:
    provider = _FakeProvider([_model_output()])

    artifact = enhance_resume("Data Analyst / BI", _SOURCE_TEXT, provider)

    assert artifact.filename == "Ideal_Resume_Data_Analyst___BI.docx"
    assert artifact.content_type == DOCX_CONTENT_TYPE
    document = Document(io.BytesIO(artifact.content))
    assert document.core_properties.title == "Ideal Resume - Data Analyst / BI"
    skills_line = next(p for p in document.paragraphs if p.text.startswith("Skills: "))
    colours = {run.text: run.font.color.rgb for run in skills_line.runs}
    assert colours["Python, SQL, "] == RGBColor(0x1F, 0x29, 0x37)
    assert colours["Kubernetes"] == RGBColor(0xFF, 0x00, 0x00)
    texts = [p.text for p in document.paragraphs]
    assert "Honors in AI | VIT Pune | 2020" in texts


def test_build_document_repairs_once_with_repair_budget() -> None:
    broken = _model_output().replace('"Jane Doe"', '"Jane Doe",', 1)
    provider = _FakeProvider([broken, _model_output()])
    request = prepare_request("Data Analyst", _SOURCE_TEXT)

    document = build_document(request, provider)

    assert document.identity.name == "Jane Doe"
    assert len(provider.prompts) == 2
    assert provider.max_tokens == [2000, 1500]


def test_build_document_honors_split_can_be_disabled(monkeypatch) -> None:
    request = prepare_request("Data Analyst", _SOURCE_TEXT)

    enabled = build_document(request, _FakeProvider([_model_output()]))
    disabled = build_document(request, _FakeProvider([_model_output()]), honors_split=False)
    monkeypatch.setenv("HONORS_SPLIT_ENABLED", "false")
    from_env = build_document(request, _FakeProvider([_model_output()]))

    assert len(enabled.education) == 2
    assert len(disabled.education) == 1
    assert len(from_env.education) == 1


def test_provider_failure_surfaces_as_ai_service_error() -> None:
    provider = _FakeProvider([RuntimeError("quota exceeded")])

    with pytest.raises(AIServiceError) as exc_info:
        enhance_resume("Data Analyst", _SOURCE_TEXT, provider)

    assert exc_info.value.status_code == 502
    assert exc_info.value.user_message == "AI service error: quota exceeded"
    assert len(provider.prompts) == 1


def test_guidance_report_is_forwarded_to_prompt() -> None:
    provider = _FakeProvider([_model_output()])
    request = prepare_request("Data Analyst", _SOURCE_TEXT, "  Add more SQL metrics.  ")

    build_document(request, provider)

    assert request.guidance_report == "Add more SQL metrics."
    assert "Add more SQL metrics." in provider.prompts[0]
    assert "Python, SQL" in provider.prompts[0]


@pytest.mark.parametrize("role", ["", "   ", None])
def test_missing_role_is_invalid_input(role) -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        prepare_request(role, _SOURCE_TEXT)
    assert exc_info.value.status_code == 400
    assert exc_info.value.user_message == "Job role is required."


def test_career_chat_forwards_recent_history_only() -> None:
    provider = _FakeProvider(["Focus on SQL window functions."])
    history = "\n".join(f"line {index}" for index in range(30))

    reply = career_chat("What next?", history, provider)

    assert reply == "Focus on SQL window functions."
    assert "line 9\n" not in provider.prompts[0]
    assert "line 10" in provider.prompts[0]
    assert "line 29" in provider.prompts[0]
    assert provider.max_tokens == [600]


def test_generate_roadmap_returns_raw_response_when_unparsed() -> None:
    provider = _FakeProvider(["**Sorry**, I can only talk about careers."])

    result = generate_roadmap("Data Analyst", provider)

    assert result == {
        "parsedData": [],
        "rawResponse": "Sorry, I can only talk about careers.",
    }
    assert provider.max_tokens == [900]
