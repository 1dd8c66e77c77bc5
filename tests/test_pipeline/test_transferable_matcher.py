"""Tests for transferable-skill matching."""

from __future__ import annotations

import asyncio

import pytest

from skill_roadmap.errors import LLMResponseError
from skill_roadmap.models.gap import CurrentSkill
from skill_roadmap.models.occupation import Skill
from skill_roadmap.pipeline.transferable_matcher import TransferableSkillsMatcher, skill_similarity

CURRENT = [
    CurrentSkill(name="Programming", level=70),
    CurrentSkill(name="Project Management", level=60),
]
TARGET = [
    Skill(name="Programming", code="2.B.5.a", importance=90, level=80),
    Skill(name="Management of Personnel Resources", code="2.B.5.d", importance=60, level=50),
]

LLM_PAYLOAD = {
    "transferableSkills": [
        {
            "skillName": "Project Management",
            "currentLevel": 60,
            "applicabilityToTarget": 75,
            "transferRationale": "Planning and stakeholder work carry over to leading teams.",
            "confidence": 0.8,
        },
        {"skillName": "", "transferRationale": "missing fields"},
    ],
    "transferPatterns": ["Management experience transfers to leadership"],
}


class TestSkillSimilarity:
    def test_exact(self):
        assert skill_similarity("Python", "python ") == 1.0

    def test_containment(self):
        assert skill_similarity("Python", "Python Programming") == 0.9

    def test_word_overlap(self):
        assert skill_similarity("data analysis", "data engineering") == pytest.approx(1 / 3)

    def test_no_overlap(self):
        assert skill_similarity("welding", "accounting") == 0.0


class TestBaseline:
    def test_direct_overlap(self):
        insights = TransferableSkillsMatcher.baseline(CURRENT, TARGET)
        assert insights.source == "baseline"
        assert insights.transfer_patterns == ["Direct skill overlap"]
        top = insights.transferable_skills[0]
        assert top.skill_name == "Programming"
        assert top.confidence == 1.0
        assert top.applicability_to_target == 90
        assert top.transfer_rationale == "Direct match with target skill: Programming"

    def test_threshold_excludes_weak_overlap(self):
        # "project management" vs "management of personnel resources" shares one of five words
        insights = TransferableSkillsMatcher.baseline(CURRENT, TARGET)
        assert [i.skill_name for i in insights.transferable_skills] == ["Programming"]

    def test_no_matches(self):
        insights = TransferableSkillsMatcher.baseline([CurrentSkill(name="Welding", level=80)], TARGET)
        assert insights.transferable_skills == []
        assert insights.transfer_patterns == []

    def test_sorted_by_confidence(self):
        current = [CurrentSkill(name="Python", level=50), CurrentSkill(name="Programming", level=50)]
        target = [Skill(name="Programming", code="x", importance=80, level=60),
                  Skill(name="Python Programming", code="y", importance=80, level=60)]
        confidences = [
            i.confidence for i in TransferableSkillsMatcher.baseline(current, target).transferable_skills
        ]
        assert confidences == sorted(confidences, reverse=True)


class TestWithLLM:
    async def test_llm_result_used_and_validated(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = LLM_PAYLOAD
        matcher = TransferableSkillsMatcher(mock_llm_client)
        insights = await matcher.find_transferable_skills(CURRENT, TARGET, "Project Manager", "Engineering Manager")

        assert insights.source == "llm"
        assert len(insights.transferable_skills) == 1
        assert insights.transferable_skills[0].applicability_to_target == 75
        assert insights.transfer_patterns == ["Management experience transfers to leadership"]

    async def test_values_clamped(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {
            "transferableSkills": [
                {
                    "skillName": "Programming",
                    "currentLevel": 140,
                    "applicabilityToTarget": -5,
                    "transferRationale": "Same skill.",
                    "confidence": 1.7,
                }
            ]
        }
        matcher = TransferableSkillsMatcher(mock_llm_client)
        insight = (await matcher.find_transferable_skills(CURRENT, TARGET, "a", "b")).transferable_skills[0]
        assert (insight.current_level, insight.applicability_to_target, insight.confidence) == (100, 0, 1.0)

    async def test_memoized(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = LLM_PAYLOAD
        matcher = TransferableSkillsMatcher(mock_llm_client)
        first = await matcher.find_transferable_skills(CURRENT, TARGET, "PM", "EM")
        second = await matcher.find_transferable_skills(list(reversed(CURRENT)), TARGET, "pm", "em")
        assert first is second
        assert mock_llm_client.generate_json.await_count == 1

    async def test_llm_parse_failure_falls_back(self, mock_llm_client):
        mock_llm_client.generate_json.side_effect = LLMResponseError("no json")
        matcher = TransferableSkillsMatcher(mock_llm_client)
        insights = await matcher.find_transferable_skills(CURRENT, TARGET, "PM", "EM")
        assert insights.source == "baseline"

    async def test_baseline_not_memoized(self, mock_llm_client):
        mock_llm_client.generate_json.side_effect = [LLMResponseError("no json"), LLM_PAYLOAD]
        matcher = TransferableSkillsMatcher(mock_llm_client)
        first = await matcher.find_transferable_skills(CURRENT, TARGET, "PM", "EM")
        second = await matcher.find_transferable_skills(CURRENT, TARGET, "PM", "EM")
        assert (first.source, second.source) == ("baseline", "llm")

    async def test_wrong_shape_falls_back(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = {"transferableSkills": "none"}
        matcher = TransferableSkillsMatcher(mock_llm_client)
        insights = await matcher.find_transferable_skills(CURRENT, TARGET, "PM", "EM")
        assert insights.source == "baseline"

    async def test_timeout_falls_back(self, mock_llm_client):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)
            return LLM_PAYLOAD

        mock_llm_client.generate_json.side_effect = slow
        matcher = TransferableSkillsMatcher(mock_llm_client, timeout=0.01)
        insights = await matcher.find_transferable_skills(CURRENT, TARGET, "PM", "EM")
        assert insights.source == "baseline"

    async def test_llm_skipped_without_skills(self, mock_llm_client):
        matcher = TransferableSkillsMatcher(mock_llm_client)
        insights = await matcher.find_transferable_skills([], TARGET, "PM", "EM")
        assert insights.transferable_skills == []
        mock_llm_client.generate_json.assert_not_called()

    async def test_prompt_lists_both_roles(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = LLM_PAYLOAD
        matcher = TransferableSkillsMatcher(mock_llm_client)
        await matcher.find_transferable_skills(CURRENT, TARGET, "Project Manager", "Engineering Manager")
        prompt = mock_llm_client.generate_json.call_args.args[0]
        assert "CURRENT ROLE: Project Manager" in prompt
        assert "- Programming (Importance: 90/100, Level: 80/100)" in prompt
