# resume_insights/services/llm_adapters/mock_adapter.py
"""
Deterministic mock adapter to mimic the AI service for development and CI.
Output depends only on the task name and the prompt.
"""

import asyncio
import hashlib
import json
import re

# skills the mock "recognises" in a resume prompt
_KNOWN_SKILLS = [
    "Python", "JavaScript", "TypeScript", "React", "Node.js", "SQL", "MongoDB",
    "Docker", "Kubernetes", "AWS", "Java", "Go", "FastAPI", "Django", "Power BI",
    "Machine Learning", "Git", "CI/CD", "REST APIs", "Communication",
]


def _digest(task: str, prompt: str) -> int:
    return int(hashlib.sha256(f"{task}:{prompt}".encode("utf-8")).hexdigest()[:8], 16)


def _skills_in(prompt: str):
    found = []
    for s in _KNOWN_SKILLS:
        if re.search(rf"(?<![\w]){re.escape(s)}(?![\w])", prompt, re.IGNORECASE):
            found.append(s)
    return found


class MockAdapter:
    name = "mock"

    async def generate(self, task: str, prompt: str) -> str:
        await asyncio.sleep(0)  # keep async signature
        h = _digest(task, prompt)

        if task == "assess":
            skills = _skills_in(prompt)
            return json.dumps({
                "atsScore": 55 + h % 40,
                "extractedSkills": skills,
                "experience": "Mid-level professional with hands-on delivery experience",
                "education": "Bachelor's degree",
                "summary": "Candidate with a practical engineering background.",
                "recommendations": [
                    "Quantify achievements with metrics",
                    "Add a dedicated skills section near the top",
                ],
                "keywords": skills[:5],
                "missingKeywords": [s for s in ("Docker", "AWS", "CI/CD") if s not in skills],
            })

        if task == "interview_questions":
            m = re.search(r"Generate (\d+)", prompt)
            count = int(m.group(1)) if m else 10
            categories = ["technical", "behavioral", "situational", "company"]
            difficulties = ["easy", "medium", "hard"]
            return json.dumps({
                "questions": [
                    {
                        "question": f"Sample interview question {i + 1}?",
                        "category": categories[(h + i) % len(categories)],
                        "difficulty": difficulties[(h + i) % len(difficulties)],
                    }
                    for i in range(count)
                ]
            })

        if task == "recommend_companies":
            skills = _skills_in(prompt) or ["Python", "SQL"]
            return json.dumps({
                "companies": [
                    {
                        "name": "Acme Analytics",
                        "industry": "Technology",
                        "size": "medium",
                        "location": {"city": "Bengaluru", "state": "Karnataka", "country": "India"},
                        "description": "Data platform company",
                        "requiredSkills": [{"skill": s, "importance": "high"} for s in skills[:3]],
                        "preferredSkills": ["Git"],
                        "experienceLevel": "mid",
                        "jobTitles": ["Software Engineer"],
                        "benefits": ["Health insurance"],
                        "companyCulture": "Collaborative",
                        "matchPercentage": 80,
                    },
                    {
                        "name": "Globex Systems",
                        "industry": "Enterprise Software",
                        "size": "enterprise",
                        "location": {"city": "Pune", "state": "Maharashtra", "country": "India"},
                        "requiredSkills": [
                            {"skill": "Java", "importance": "critical"},
                            {"skill": "Kubernetes", "importance": "medium"},
                        ],
                        "experienceLevel": "senior",
                        "matchPercentage": 40,
                    },
                ]
            })

        return json.dumps({"task": task, "hash": h})


def build_adapter(settings) -> MockAdapter:
    return MockAdapter()
