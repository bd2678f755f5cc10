from __future__ import annotations

from services.enhancer.enhance_core.roadmap import clean_roadmap_text, parse_roadmap


_RESPONSE = """
**Learning Roadmap**

Excel Basics - 10 days
   - YouTube Channel: Chandoo (https://youtube.com/@chandoo)
SQL Fundamentals - 15 days
   - YouTube Channel: Kudvenkat (https://www.youtube.com/@Csharp-video-tutorialsBlogspot)
Statistics - 1 day
   - YouTube Channel: StatQuest with Josh Starmer (https://statquest.org)
Power BI - 20 days
   - YouTube Channel: Guy in a Cube
Dangling Topic - 12 days
Python for Analysis - 25 days
   - YouTube Channel: Corey Schafer (https://youtube.com/@coreyms)
"""


def test_clean_roadmap_text_drops_bold_and_blank_lines() -> None:
    cleaned = clean_roadmap_text(_RESPONSE)

    assert "**" not in cleaned
    assert cleaned.split("\n")[0] == "Learning Roadmap"
    assert "\n\n" not in cleaned
    assert cleaned.split("\n")[2] == "- YouTube Channel: Chandoo (https://youtube.com/@chandoo)"


def test_parse_roadmap_pairs_topics_with_channels() -> None:
    steps = [step.model_dump(by_alias=True) for step in parse_roadmap(_RESPONSE)]

    assert [step["skillName"] for step in steps] == [
        "Excel Basics",
        "SQL Fundamentals",
        "Statistics",
        "Power BI",
        "Python for Analysis",
    ]
    assert [step["skillNumber"] for step in steps] == ["1", "2", "3", "4", "5"]
    assert steps[0] == {
        "skillNumber": "1",
        "skillName": "Excel Basics",
        "days": "10 days",
        "channel": "Chandoo",
        "link": "https://youtube.com/@chandoo",
    }
    assert steps[2]["days"] == "1 day"


def test_parse_roadmap_rebuilds_missing_or_foreign_links() -> None:
    steps = parse_roadmap(_RESPONSE)

    assert steps[1].link == "https://www.youtube.com/@Csharp-video-tutorialsBlogspot"
    assert steps[2].link == "https://youtube.com/StatQuestwithJoshStarmer"
    assert steps[3].link == "https://youtube.com/GuyinaCube"


def test_parse_roadmap_returns_empty_for_free_text() -> None:
    assert parse_roadmap("I recommend learning SQL first, then Python.") == []
    assert parse_roadmap("") == []
