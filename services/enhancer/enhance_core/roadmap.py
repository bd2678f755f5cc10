"""Line-pair grammar for learning-roadmap responses.

A topic line ``"<topic> - <N> days"`` is paired with the resource line that
immediately follows it (``"- YouTube Channel: <name> (<url>)"``).  Lines that
do not fit the grammar are dropped rather than failing the whole parse.
"""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

_BOLD = re.compile(r"\*\*")
_TOPIC_LINE = re.compile(r"^([^-]+?)\s*-\s*(\d+\s*days?)\s*$", re.I)
_CHANNEL_LINE = re.compile(r"^-\s*YouTube\s*Channel:\s*([^(]+?)\s*(?:\((https?://[^)]*)\)?)?\s*$", re.I)
_WHITESPACE = re.compile(r"\s+")


class RoadmapStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    skill_number: str = Field(alias="skillNumber")
    skill_name: str = Field(alias="skillName")
    days: str
    channel: str
    link: str


def clean_roadmap_text(text: str) -> str:
    lines = (_BOLD.sub("", line).strip() for line in (text or "").splitlines())
    return "\n".join(line for line in lines if line)


def parse_roadmap(text: str) -> List[RoadmapStep]:
    lines = clean_roadmap_text(text).split("\n")
    steps: List[RoadmapStep] = []
    index = 0
    while index < len(lines):
        topic = _TOPIC_LINE.match(lines[index])
        lookahead = lines[index + 1] if index + 1 < len(lines) else ""
        channel = _CHANNEL_LINE.match(lookahead) if topic else None
        if topic and channel:
            name = channel.group(1).strip()
            steps.append(
                RoadmapStep(
                    skill_number=str(len(steps) + 1),
                    skill_name=topic.group(1).strip(),
                    days=topic.group(2).strip(),
                    channel=name,
                    link=_channel_link(name, channel.group(2)),
                )
            )
            index += 2
            continue
        index += 1
    return steps


def _channel_link(name: str, url: Optional[str]) -> str:
    if url and "youtube.com" in url:
        return url
    return f"https://youtube.com/{_WHITESPACE.sub('', name)}"
