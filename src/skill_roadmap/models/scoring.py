"""Pydantic models for résumé scoring output."""

from __future__ import annotations

from pydantic import BaseModel


class CategoryScore(BaseModel):
    score: int
    max_score: int
    subscores: dict[str, int]
    insights: list[str] = []

    @property
    def normalized(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return self.score / self.max_score * 100


class Recommendation(BaseModel):
    category: str
    priority: str  # "high" | "medium" | "low"
    title: str
    actions: list[str]


class ScoreReport(BaseModel):
    overall: int
    categories: dict[str, CategoryScore]
    strengths: list[str] = []
    weaknesses: list[str] = []
    recommendations: list[Recommendation] = []
