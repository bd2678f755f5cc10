from __future__ import annotations

import json
from typing import Any

ANALYSIS_SOURCE_CHAR_LIMIT = 4000

_RESUME_JSON_SHAPE: dict[str, Any] = {
    "personalInfo": {
        "name": "[Extract from original - MUST have a space between first and last name]",
        "email": "[Extract from original - email only, no mailto:]",
        "phone": "[Extract from original - number only]",
        "location": "[Extract from original]",
        "linkedin": "[ONLY if the URL exists in the original resume, else empty string]",
        "github": "[ONLY if the URL exists in the original resume, else empty string]",
        "portfolio": "[ONLY if the URL exists in the original resume, else empty string]",
    },
    "professionalSummary": "[2-3 line summary aligned to the target role and original experience]",
    "coreSkills": {
        "Programming": ["[Skills]"],
        "Frameworks/Tools": ["[Skills]"],
        "Data/Cloud": ["[Skills]"],
        "Other": ["[Skills]"],
    },
    "experience": [
        {
            "company": "[Company name]",
            "position": "[Job title]",
            "duration": "[Time period]",
            "achievements": ["[Enhanced bullet points with action verbs and results]"],
        }
    ],
    "education": [
        {
            "degree": "[Degree name]",
            "institution": "[School/University]",
            "year": "[Year]",
            "details": "[GPA, relevant coursework, honors if mentioned]",
        }
    ],
    "projects": [
        {
            "name": "[Project name]",
            "url": "[ONLY if the URL exists in the original resume text, else empty string]",
            "description": "[Technically detailed description]",
            "technologies": ["[Tech stack]"],
            "highlights": ["[Key achievements or features]"],
        }
    ],
    "certifications": [
        {
            "name": "[Certification name]",
            "url": "[ONLY if the URL exists in the original resume text, else empty string]",
        }
    ],
    "additionalSections": {
        "languages": ["[If mentioned]"],
        "achievements": ["[Awards, recognitions]"],
        "volunteering": ["[Volunteer work if mentioned]"],
    },
}


def resume_enhancement_prompt(
    target_role: str, source_text: str, guidance_report: str | None = None
) -> str:
    shape_json = json.dumps(_RESUME_JSON_SHAPE, ensure_ascii=False, indent=2)
    guidance = ""
    if guidance_report and guidance_report.strip():
        guidance = f"ANALYSIS REPORT:\n{guidance_report.strip()}\n\n"
    return (
        "You are a professional resume writer. Create an enhanced, ideal resume for the "
        f'"{target_role}" role using the original resume and analysis data.\n\n'
        f"ORIGINAL RESUME CONTENT:\n{source_text}\n\n"
        f"{guidance}"
        "INSTRUCTIONS:\n"
        "1. Use the original resume as the ONLY factual source of truth. Do NOT invent, "
        "fabricate, or assume any data.\n"
        "2. Be CONSERVATIVE with additions. Only add a skill, certification or project if it "
        "is a direct complement to what already exists AND is critical for the target role.\n"
        "3. Rewrite existing content professionally with strong action verbs and quantified "
        "impact where the original supports it.\n"
        "4. Write the professional summary using ONLY skills and experience already present.\n"
        "5. Group skills from the original resume into logical categories.\n"
        "6. Keep every original certification.\n"
        "7. Do NOT add entirely new projects unless the analysis report explicitly asks for it.\n\n"
        "URL/LINK RULES (CRITICAL):\n"
        "- ONLY include URLs that are EXPLICITLY written in the original resume text.\n"
        "- If NO URL exists for a field, set the value to an empty string.\n"
        "- NEVER fabricate, guess, or construct URLs. NEVER output file:// or local paths.\n"
        "- For email: just the email address. For phone: just the number.\n\n"
        "Return the enhanced resume in EXACTLY this JSON shape:\n"
        f"{shape_json}\n\n"
        "Return ONLY the JSON object. No markdown, no code fences, no commentary."
    )


def json_repair_prompt(raw_text: str) -> str:
    return (
        "You are a strict JSON repair tool.\n"
        "Fix the input so it is valid JSON that matches the original structure.\n"
        "Rules:\n"
        "- Output ONLY the JSON object (no markdown, no commentary).\n"
        "- Preserve all keys and values; only fix escaping, quotes, commas, and brackets.\n"
        f"INPUT:\n{raw_text}"
    )


def resume_analysis_prompt(target_role: str, source_text: str) -> str:
    truncated = source_text[:ANALYSIS_SOURCE_CHAR_LIMIT]
    if len(source_text) > ANALYSIS_SOURCE_CHAR_LIMIT:
        truncated = f"{truncated} ...[truncated]"
    return (
        f'Analyze this resume for the "{target_role}" role. '
        "Provide a detailed, structured analysis.\n\n"
        f"RESUME CONTENT: {truncated}\n\n"
        "Provide analysis in EXACTLY this format:\n\n"
        "**SCORE BREAKDOWN:**\n"
        "ATS Compatibility Score: [0-100]%\n"
        "Content Relevance Score: [0-100]%\n"
        "Structure and Formatting Score: [0-100]%\n"
        "Overall Resume Score: [0-100]%\n\n"
        "**STRENGTHS:**\n"
        "• [Specific strength with context] (five bullets)\n\n"
        "**AREAS FOR IMPROVEMENT:**\n"
        "• [Specific improvement with actionable advice] (five bullets)\n\n"
        "**DETAILED ANALYSIS:**\n\n"
        "ATS COMPATIBILITY:\n[Keywords, formatting issues]\n\n"
        "CONTENT ASSESSMENT:\n[Relevance to the target role, skills alignment]\n\n"
        "FORMATTING & STRUCTURE:\n[Layout, sections, readability]\n\n"
        "RECOMMENDATIONS:\n[Suggestions prioritized by impact]\n\n"
        "**TARGET ROLE ALIGNMENT:**\n"
        f'[How well the resume matches the "{target_role}" position requirements]\n\n'
        "**ACTION PLAN:**\n"
        "[Step-by-step improvement recommendations]"
    )


def career_chat_prompt(query: str, conversation_context: str) -> str:
    history = conversation_context or "No prior context. This is a new conversation."
    return (
        "You are a career counselor for freshers and early professionals. Give clear, "
        "practical, career-oriented guidance in a natural, human way, strictly focused on "
        "careers.\n\n"
        "CONVERSATION HISTORY:\n"
        f"{history}\n\n"
        "CONTEXT RULES:\n"
        "- If context exists, this is an ONGOING conversation and the user message answers "
        "your last reply.\n"
        "- Never repeat questions already asked or answered.\n"
        "- Short replies (yes / no / role names / numbers) are meaningful answers.\n"
        "- If the intent is obvious (especially time-sensitive, like interviews), do not ask "
        "clarifying questions; help immediately.\n"
        "- Unclear input: ask ONE precise clarifying question only.\n\n"
        "SCOPE: career guidance, interview preparation, resume and ATS, skills and roadmaps, "
        "job search strategy. No unrelated topics.\n\n"
        "STYLE: match the user's energy, concise by default, professional and calm, no "
        "filler and no meta commentary. If the user says goodbye, respond once, briefly.\n\n"
        f"USER MESSAGE:\n{query.strip()}\n\n"
        "YOUR RESPONSE:\n"
    )


def roadmap_prompt(target_role: str) -> str:
    return (
        f'Create an industry oriented learning roadmap for the "{target_role.strip()}" role. '
        "Start from the very basics and progress to advanced skills; the reader is a fresher.\n"
        "Format exactly as:\n"
        "Topic Name - X days\n"
        "   - YouTube Channel: Channel Name (https://youtube.com/...)\n"
        "Topic Name - X days\n"
        "   - YouTube Channel: Channel Name (https://youtube.com/...)\n\n"
        "Example (follow the format strictly, do not copy the topics):\n"
        "Data Structures - 20 days\n"
        "   - YouTube Channel: Neso Academy (https://youtube.com/...)\n"
        "Algorithms - 25 days\n"
        "   - YouTube Channel: CodeWithHarry (https://youtube.com/...)\n\n"
        "Keep days realistic for freshers (10+). No additional explanations."
    )
