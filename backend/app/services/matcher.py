from __future__ import annotations

import math
import re
from collections import Counter
from typing import Any

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "tech": (
        "javascript", "typescript", "python", "java", "c++", "c#", "php", "ruby", "go", "rust",
        "react", "vue", "angular", "node.js", "express", "django", "flask", "spring", "laravel",
        "html", "css", "sass", "scss", "tailwind", "bootstrap", "jquery", "redux", "mobx",
        "graphql", "rest", "api", "microservices", "kubernetes", "docker", "aws", "azure", "gcp",
        "machine learning", "artificial intelligence", "data science", "cloud computing",
        "full stack", "front end", "back end", "user experience", "user interface",
        "version control", "continuous integration", "test driven development",
    ),
    "database": (
        "mysql", "postgresql", "mongodb", "redis", "elasticsearch", "sqlite", "oracle",
        "sql", "nosql", "database", "prisma", "sequelize", "mongoose", "typeorm",
    ),
    "soft": (
        "leadership", "teamwork", "communication", "problem solving", "analytical",
        "creative", "innovative", "agile", "scrum", "project management", "collaboration",
        "mentoring", "training", "presentation", "documentation", "testing", "debugging",
    ),
    "experience": (
        "junior", "senior", "lead", "principal", "staff", "manager", "director",
        "intern", "entry level", "mid level", "experienced", "expert",
    ),
}

CATEGORY_WEIGHTS = {"tech": 0.4, "database": 0.3, "soft": 0.2, "experience": 0.1}
MAX_SUGGESTIONS = 5


class JobMatcher:
    """Keyword overlap between a resume and a job application's text."""

    def calculate_match(self, resume_text: str | None, job_data: dict[str, Any]) -> dict[str, Any]:
        job_text = " ".join(
            str(job_data.get(name) or "")
            for name in ("description", "requirements", "additional_info", "position", "job_type")
        )
        if not (resume_text or "").strip() or not job_text.strip():
            return self._empty_result()

        resume_keywords = self.extract_keywords(resume_text or "")
        job_keywords = self.extract_keywords(job_text)
        resume_all = {kw for keywords in resume_keywords.values() for kw in keywords}
        job_all = [kw for keywords in job_keywords.values() for kw in keywords]

        categories: dict[str, dict[str, int]] = {}
        weighted_score = 0.0
        total_weight = 0.0
        for category, weight in CATEGORY_WEIGHTS.items():
            wanted = job_keywords[category]
            matched = sum(1 for keyword in wanted if keyword in resume_all)
            categories[category] = {"matched": matched, "total": len(wanted)}
            if wanted:
                weighted_score += matched / len(wanted) * weight
                total_weight += weight

        percentage = math.floor(weighted_score / total_weight * 100 + 0.5) if total_weight else 0
        matched_keywords = [kw for kw in job_all if kw in resume_all]
        missing_keywords = [kw for kw in job_all if kw not in resume_all]

        return {
            "percentage": percentage,
            "breakdown": {
                "matched": matched_keywords,
                "missing": missing_keywords,
                "categories": categories,
            },
            "suggestions": self._suggestions(missing_keywords, job_text),
        }

    def extract_keywords(self, text: str) -> dict[str, list[str]]:
        lowered = text.lower()
        tokens = set(self._tokens(lowered))
        found: dict[str, list[str]] = {category: [] for category in CATEGORY_KEYWORDS}
        for category, keywords in CATEGORY_KEYWORDS.items():
            for keyword in keywords:
                if self._contains(keyword, tokens, lowered):
                    found[category].append(keyword)
        return found

    def _suggestions(self, missing: list[str], job_text: str) -> list[str]:
        lowered = job_text.lower()
        token_counts = Counter(self._tokens(lowered))
        ranked = sorted(missing, key=lambda kw: -self._occurrences(kw, token_counts, lowered))
        return ranked[:MAX_SUGGESTIONS]

    def _contains(self, keyword: str, tokens: set[str], lowered: str) -> bool:
        if " " in keyword:
            return self._phrase_pattern(keyword).search(lowered) is not None
        return self._normalize_token(keyword) in tokens

    def _occurrences(self, keyword: str, token_counts: Counter, lowered: str) -> int:
        if " " in keyword:
            return len(self._phrase_pattern(keyword).findall(lowered)) or 1
        return token_counts.get(self._normalize_token(keyword), 0) or 1

    def _phrase_pattern(self, phrase: str) -> re.Pattern:
        return re.compile(rf"(?<![a-z0-9]){re.escape(phrase)}(?![a-z0-9])")

    def _tokens(self, lowered: str) -> list[str]:
        raw = re.findall(r"[a-z0-9][a-z0-9+#.\-]*", lowered)
        return [token for token in (self._normalize_token(t) for t in raw) if len(token) > 1]

    def _normalize_token(self, token: str) -> str:
        return re.sub(r"[.\-]", "", token.strip().lower())

    def _empty_result(self) -> dict[str, Any]:
        return {
            "percentage": 0,
            "breakdown": {
                "matched": [],
                "missing": [],
                "categories": {category: {"matched": 0, "total": 0} for category in CATEGORY_WEIGHTS},
            },
            "suggestions": [],
        }
