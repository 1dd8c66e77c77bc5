"""Tests for the multi-factor résumé scorer."""

from __future__ import annotations

import json

import pytest

from skill_roadmap.config import ScoringConfig
from skill_roadmap.errors import InvalidResumeError
from skill_roadmap.models.resume import ResumeDocument, parse_resume_document
from skill_roadmap.scoring.scorer import CATEGORY_LABELS, SUBSCORE_MAXIMA, MultiFactorScorer
from skill_roadmap.utils.content_hash import compute_content_hash

THIN_RESUME = {"content": "Worked at a shop. I like computers!!!"}

PLAIN_TEXT_RESUME = """\
SUMMARY
Data engineer with 5 years of experience delivering analytics platforms.

EXPERIENCE
Senior Data Engineer, Retail Co (2022 - Present)
- Built Airflow pipelines in Python and SQL processing 50M rows daily
- Reduced warehouse costs by 30% through partition pruning
- Led a team of 4 engineers; mentored 2 analysts

Data Engineer, Bank Corp (2019 - 2022)
- Developed Spark jobs on AWS, improving report latency by 60%
- Implemented CI/CD with Docker and GitHub Actions

EDUCATION
B.S. Statistics, City College (2019)

SKILLS
Python, SQL, Spark, Airflow, AWS, Docker
"""


@pytest.fixture
def scorer():
    return MultiFactorScorer()


class TestScoreShape:
    def test_all_categories_present(self, scorer, sample_resume):
        report = scorer.score(sample_resume)
        assert set(report.categories) == set(SUBSCORE_MAXIMA)
        assert set(report.categories) == set(CATEGORY_LABELS)

    def test_subscores_within_caps(self, scorer, sample_resume):
        report = scorer.score(sample_resume)
        for name, category in report.categories.items():
            maxima = SUBSCORE_MAXIMA[name]
            assert set(category.subscores) == set(maxima)
            for key, value in category.subscores.items():
                assert 0 <= value <= maxima[key], (name, key)
            assert category.score == sum(category.subscores.values())
            assert category.max_score == sum(maxima.values())

    def test_category_maxima(self):
        totals = {name: sum(m.values()) for name, m in SUBSCORE_MAXIMA.items()}
        assert totals == {
            "content_quality": 60,
            "structural_integrity": 60,
            "professional_presentation": 55,
            "skills_alignment": 60,
            "experience_depth": 70,
            "career_progression": 55,
            "ats_optimization": 50,
            "industry_relevance": 50,
        }

    def test_overall_in_range(self, scorer, sample_resume):
        for doc in (sample_resume, THIN_RESUME, {}, {"content": PLAIN_TEXT_RESUME}):
            assert 0 <= scorer.score(doc).overall <= 100

    def test_overall_is_weighted_average(self, scorer, sample_resume):
        report = scorer.score(sample_resume)
        weights = ScoringConfig().weights()
        expected = sum(c.normalized * weights[n] for n, c in report.categories.items())
        assert abs(report.overall - expected) <= 0.5


class TestScoreBehavior:
    def test_deterministic(self, scorer, sample_resume):
        assert scorer.score(sample_resume) == scorer.score(sample_resume)

    def test_accepts_json_text(self, scorer, sample_resume):
        assert scorer.score(json.dumps(sample_resume)) == scorer.score(sample_resume)

    def test_rich_resume_beats_thin_resume(self, scorer, sample_resume):
        assert scorer.score(sample_resume).overall > scorer.score(THIN_RESUME).overall + 20

    def test_plain_text_resume_scores_reasonably(self, scorer):
        report = scorer.score({"content": PLAIN_TEXT_RESUME})
        assert report.overall > scorer.score(THIN_RESUME).overall
        assert report.categories["content_quality"].subscores["achievement_quantification"] > 0

    def test_empty_document_scores_near_zero(self, scorer):
        report = scorer.score({})
        assert report.overall <= 5
        assert report.strengths == []
        assert len(report.weaknesses) == len(SUBSCORE_MAXIMA)

    def test_metrics_raise_content_quality(self, scorer):
        vague = {"content": "- Worked on the billing service\n- Helped with the database"}
        specific = {
            "content": "- Reduced billing latency by 40%\n- Migrated 3 databases, saving $50K per year"
        }
        assert (
            scorer.score(specific).categories["content_quality"].score
            > scorer.score(vague).categories["content_quality"].score
        )

    def test_contact_information(self, scorer, sample_resume):
        subscores = scorer.score(sample_resume).categories["structural_integrity"].subscores
        assert subscores["contact_information"] == 5

    def test_invalid_json_raises(self, scorer):
        with pytest.raises(InvalidResumeError):
            scorer.score("{not json")

    def test_non_object_raises(self, scorer):
        with pytest.raises(InvalidResumeError):
            scorer.score("[1, 2, 3]")

    def test_wrong_field_type_raises(self, scorer):
        with pytest.raises(InvalidResumeError):
            scorer.score({"experience": "ten years"})

    def test_volatile_metadata_does_not_change_score(self, scorer, sample_resume):
        changed = {
            **sample_resume,
            "metadata": {**sample_resume["metadata"], "uploadedAt": "2030-01-01T00:00:00Z"},
        }
        assert scorer.score(changed) == scorer.score(sample_resume)


class TestReportDerivations:
    def test_strengths_and_weaknesses_thresholds(self, scorer, sample_resume):
        report = scorer.score(sample_resume)
        strong = [n for n, c in report.categories.items() if c.normalized >= 80]
        weak = [n for n, c in report.categories.items() if c.normalized < 60]
        assert len(report.strengths) == len(strong)
        assert len(report.weaknesses) == len(weak)

    def test_recommendations_only_below_80(self, scorer, sample_resume):
        report = scorer.score(sample_resume)
        for rec in report.recommendations:
            assert report.categories[rec.category].normalized < 80
            assert rec.actions

    def test_recommendation_priorities(self, scorer):
        report = scorer.score(THIN_RESUME)
        for rec in report.recommendations:
            normalized = report.categories[rec.category].normalized
            if normalized < 40:
                assert rec.priority == "high"
            elif normalized < 60:
                assert rec.priority == "medium"
            else:
                assert rec.priority == "low"

    def test_recommendations_sorted_by_priority(self, scorer):
        report = scorer.score(THIN_RESUME)
        order = {"high": 0, "medium": 1, "low": 2}
        ranks = [order[r.priority] for r in report.recommendations]
        assert ranks == sorted(ranks)

    def test_insights_for_weak_subscores(self, scorer):
        report = scorer.score(THIN_RESUME)
        category = report.categories["structural_integrity"]
        assert "Provide email, phone and location." in category.insights

    def test_custom_weights(self, sample_resume):
        heavy = ScoringConfig(
            content_quality=1.0,
            structural_integrity=0,
            professional_presentation=0,
            skills_alignment=0,
            experience_depth=0,
            career_progression=0,
            ats_optimization=0,
            industry_relevance=0,
        )
        report = MultiFactorScorer(heavy).score(sample_resume)
        assert abs(report.overall - report.categories["content_quality"].normalized) <= 0.5


class TestScoreMatchesContentHash:
    BASE = (
        "SUMMARY\nBackend engineer with 6 years of experience.\n\n"
        "EXPERIENCE\n- Reduced API latency by 40%\n- Led a team of 5 engineers\n\nSKILLS\n"
    )

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            (BASE + "Python\t\tDocker\t\tAWS", BASE + "Python Docker AWS"),
            (BASE.upper() + "PYTHON, DOCKER", BASE.lower() + "python, docker"),
            (BASE + "Python\n\n\n\n  Docker  ", BASE + "Python\nDocker"),
        ],
    )
    def test_equal_hash_means_equal_score(self, scorer, first, second):
        a = ResumeDocument(content=first)
        b = ResumeDocument(content=second)
        assert compute_content_hash(a) == compute_content_hash(b)
        assert scorer.score(a) == scorer.score(b)

    def test_file_location_does_not_change_score(self, scorer, sample_resume):
        moved = {**sample_resume, "filePath": "/tmp/elsewhere/jane.json"}
        assert compute_content_hash(parse_resume_document(moved)) == compute_content_hash(
            parse_resume_document(sample_resume)
        )
        assert scorer.score(moved) == scorer.score(sample_resume)

    def test_label_headers_count_towards_hierarchy(self, scorer):
        with_labels = {"content": "Professional Experience:\n- Built APIs\nTechnical Background:\n- Python"}
        without = {"content": "Professional Experience\n- Built APIs\nTechnical Background\n- Python"}
        hierarchy = "visual_hierarchy"
        assert (
            scorer.score(with_labels).categories["structural_integrity"].subscores[hierarchy]
            > scorer.score(without).categories["structural_integrity"].subscores[hierarchy]
        )
