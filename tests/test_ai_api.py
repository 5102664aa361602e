import io
import json

import docx
import pytest

from skillforge.errors import AIProviderError
from skillforge.models import User

FOUR = ["Learn the basics", "Build a toy project", "Read the docs", "Ship something"]


def _user(db, email="ada@example.com"):
    db.expire_all()
    return db.query(User).filter(User.email == email).one()


class TestGenerateRoadmap:
    def test_recovers_sloppy_json(self, client, auth_headers, fake_ai, db):
        fake_ai.queue(
            "Sure! Here is your plan:\n```json\n"
            "{'Data Science': {'Week 1': ['Learn the basics', 'Build a toy project', 'Read the docs', 'Ship something',],}}\n"
            "```"
        )

        response = client.post("/api/generate-roadmap", json={"interests": ["Data Science"]}, headers=auth_headers)

        assert response.status_code == 200, response.text
        assert response.json() == {
            "roadmaps": {"Data Science": [{"title": "week 1", "steps": FOUR}]},
            "progress": 10,
        }
        assert _user(db).roadmap_progress == 10
        assert "Data Science" in fake_ai.prompts[0]

    def test_generated_roadmap_can_be_saved(self, client, auth_headers, fake_ai):
        fake_ai.queue(json.dumps({"roadmaps": {"Cloud": {"Week 1": FOUR, "Week 2": FOUR}}}))
        generated = client.post("/api/generate-roadmap", json={"interests": ["Cloud"]}, headers=auth_headers).json()

        saved = client.post(
            "/api/roadmaps",
            json={"interest": "Cloud", "weeks": generated["roadmaps"]["Cloud"]},
            headers=auth_headers,
        )

        assert saved.status_code == 200
        assert len(saved.json()["roadmap"]["weeks"]) == 2

    def test_three_step_week_is_an_upstream_failure(self, client, auth_headers, fake_ai, db):
        fake_ai.queue(json.dumps({"Data Science": {"Week 1": FOUR[:3]}}))

        response = client.post("/api/generate-roadmap", json={"interests": ["Data Science"]}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["message"].startswith("AI roadmap rejected")
        assert not _user(db).roadmap_progress

    def test_prose_is_an_upstream_failure(self, client, auth_headers, fake_ai):
        fake_ai.queue("I'm sorry, I can't help with that today.")

        response = client.post("/api/generate-roadmap", json={"interests": ["Data Science"]}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json() == {"message": "AI provider returned an unusable response"}

    def test_empty_object_means_no_roadmaps(self, client, auth_headers, fake_ai):
        fake_ai.queue("{}")

        response = client.post("/api/generate-roadmap", json={"interests": ["Data Science"]}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json() == {"message": "AI returned no roadmaps"}

    @pytest.mark.parametrize("payload", [{}, {"interests": []}, {"interests": ["  ", ""]}])
    def test_interests_required(self, client, auth_headers, fake_ai, payload):
        response = client.post("/api/generate-roadmap", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"message": "No interests provided"}
        assert fake_ai.prompts == []

    def test_provider_failure(self, client, auth_headers, fake_ai):
        fake_ai.queue(AIProviderError())

        response = client.post("/api/generate-roadmap", json={"interests": ["Data Science"]}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json() == {"message": "AI provider request failed"}


class TestAnalyzeResume:
    def test_high_score_earns_both_badges(self, client, auth_headers, fake_ai, db):
        fake_ai.queue('{"score": 97, "suggestions": ["Trim the summary"]}')

        response = client.post("/api/analyze-resume", data={"text": "Senior engineer, 10 years"}, headers=auth_headers)

        assert response.status_code == 200, response.text
        assert response.json() == {
            "score": 97,
            "suggestions": ["Trim the summary"],
            "badges": ["Resume Pro", "Resume Elite"],
        }
        user = _user(db)
        assert user.resume_score == 97
        assert user.resume_text == "Senior engineer, 10 years"

    def test_reanalysis_does_not_duplicate_badges(self, client, auth_headers, fake_ai):
        fake_ai.queue('{"score": 85, "suggestions": []}', '{"score": 90, "suggestions": []}')

        client.post("/api/analyze-resume", data={"text": "v1"}, headers=auth_headers)
        second = client.post("/api/analyze-resume", data={"text": "v2"}, headers=auth_headers).json()

        assert second["badges"] == ["Resume Pro"]
        assert len(second["suggestions"]) == 3

    def test_unparseable_review_degrades(self, client, auth_headers, fake_ai):
        fake_ai.queue(
            "Overall score: 72/100\n"
            "- Quantify your sales results with numbers\n"
            "- Lead with a short summary"
        )

        response = client.post("/api/analyze-resume", data={"text": "Sales manager"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "score": 72,
            "suggestions": ["Quantify your sales results with numbers", "Lead with a short summary"],
            "badges": [],
        }

    def test_review_without_a_number_defaults_to_50(self, client, auth_headers, fake_ai):
        fake_ai.queue("Decent resume.\nAdd more detail to each role")

        body = client.post("/api/analyze-resume", data={"text": "Sales manager"}, headers=auth_headers).json()

        assert body["score"] == 50
        assert body["suggestions"] == ["Decent resume.", "Add more detail to each role"]

    def test_text_upload(self, client, auth_headers, fake_ai):
        fake_ai.queue('{"score": 60, "suggestions": ["Add a projects section"]}')

        response = client.post(
            "/api/analyze-resume",
            files={"file": ("resume.txt", b"Backend developer\nPython, SQL", "text/plain")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert "Backend developer" in fake_ai.prompts[0]

    def test_docx_upload(self, client, auth_headers, fake_ai):
        document = docx.Document()
        document.add_paragraph("Data analyst")
        document.add_paragraph("Tableau, Excel, SQL")
        buffer = io.BytesIO()
        document.save(buffer)
        fake_ai.queue('{"score": 64, "suggestions": ["Show dashboards you built"]}')

        response = client.post(
            "/api/analyze-resume",
            files={"file": ("cv.docx", buffer.getvalue(), "application/octet-stream")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert "Tableau, Excel, SQL" in fake_ai.prompts[0]

    def test_unsupported_file_type(self, client, auth_headers, fake_ai):
        response = client.post(
            "/api/analyze-resume",
            files={"file": ("photo.png", b"\x89PNG", "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Only PDF, TXT, or Word (DOCX) files allowed"}

    def test_empty_resume(self, client, auth_headers, fake_ai):
        response = client.post("/api/analyze-resume", data={"text": "   "}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"message": "No resume text found!"}
        assert fake_ai.prompts == []


class TestMatchJobDescription:
    def test_requires_resume_text(self, client, auth_headers, fake_ai):
        response = client.post("/api/match-jd", json={"jobDescription": "Python developer"}, headers=auth_headers)

        assert response.status_code == 400
        assert fake_ai.prompts == []

    def test_requires_job_description(self, client, auth_headers, fake_ai):
        response = client.post("/api/match-jd", json={"resumeText": "Python"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"message": "Job description is required"}

    def test_prose_wrapped_answer_is_normalized(self, client, auth_headers, fake_ai):
        fake_ai.queue(
            'Here is the analysis: {"match_score": "82%", "matched_skills": ["Python", "SQL"], '
            '"gaps": [{"name": "Docker", "why": "Required"}]} Good luck!'
        )

        response = client.post(
            "/api/match-jd",
            json={"jobDescription": "Python developer with Docker", "resumeText": "Python and SQL"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "matchedSkills": [{"skill": "Python", "description": ""}, {"skill": "SQL", "description": ""}],
            "missingSkills": [{"skill": "Docker", "description": "Required"}],
            "suggestions": [],
            "matchScore": 82,
        }

    def test_falls_back_to_analyzed_resume(self, client, auth_headers, fake_ai):
        fake_ai.queue('{"score": 70, "suggestions": []}', '{"matchScore": 55}')
        client.post("/api/analyze-resume", data={"text": "Kotlin mobile developer"}, headers=auth_headers)

        response = client.post("/api/match-jd", json={"jobDescription": "Android role"}, headers=auth_headers)

        assert response.json()["matchScore"] == 55
        assert "Kotlin mobile developer" in fake_ai.prompts[1]

    def test_empty_analysis_is_an_upstream_failure(self, client, auth_headers, fake_ai):
        fake_ai.queue('{"notes": "n/a"}')

        response = client.post(
            "/api/match-jd",
            json={"jobDescription": "Python developer", "resumeText": "Python"},
            headers=auth_headers,
        )

        assert response.status_code == 502


class TestInterview:
    def test_aliases_are_normalized(self, client, auth_headers, fake_ai):
        fake_ai.queue('{"Questions": [{"q": "Why Python?", "sample_answer": "Readable and fast to ship."}]}')

        response = client.post("/api/interview", json={"role": "Backend developer", "count": 1}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"questions": [{"question": "Why Python?", "answer": "Readable and fast to ship."}]}
        assert "1 interview questions" in fake_ai.prompts[0]

    @pytest.mark.parametrize("completion", ["Great question! Let me think.", '{"questions": []}'])
    def test_nothing_usable_is_502(self, client, auth_headers, fake_ai, completion):
        fake_ai.queue(completion)

        response = client.post("/api/interview", json={"role": "Backend developer"}, headers=auth_headers)

        assert response.status_code == 502

    @pytest.mark.parametrize("payload", [{"role": ""}, {"role": "Dev", "count": 0}, {"role": "Dev", "count": 50}])
    def test_bad_requests(self, client, auth_headers, fake_ai, payload):
        assert client.post("/api/interview", json=payload, headers=auth_headers).status_code == 400


def test_skill_gap(client, auth_headers, fake_ai):
    fake_ai.queue(json.dumps({
        "strengths": ["SQL"],
        "skill_gaps": [{"skill": "Airflow", "reason": "Orchestration"}],
        "next_steps": ["Build an ETL project"],
    }))

    response = client.post(
        "/api/skill-gap",
        json={"targetRole": "Data Engineer", "skills": ["SQL", " "]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        "matchingSkills": [{"skill": "SQL", "description": ""}],
        "missingSkills": [{"skill": "Airflow", "description": "Orchestration"}],
        "recommendations": [{"title": "Build an ETL project", "description": ""}],
    }
    assert "Current skills: SQL" in fake_ai.prompts[0]


def test_skill_gap_requires_target_role(client, auth_headers, fake_ai):
    response = client.post("/api/skill-gap", json={"skills": ["SQL"]}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Target role is required"}


def test_insights(client, auth_headers, fake_ai):
    fake_ai.queue(json.dumps({
        "overview": "Strong demand",
        "market_trends": ["LLM ops"],
        "top_skills": [{"name": "PyTorch", "why": "Industry standard"}],
        "career_paths": [{"role": "ML Engineer"}],
    }))

    response = client.post("/api/insights", json={"interest": "Machine Learning"}, headers=auth_headers)

    assert response.json() == {
        "trends": [{"title": "LLM ops", "description": ""}],
        "skills": [{"skill": "PyTorch", "description": "Industry standard"}],
        "roles": [{"title": "ML Engineer", "description": ""}],
        "summary": "Strong demand",
    }


def test_ai_endpoints_require_token(client, fake_ai):
    for path in ("/api/generate-roadmap", "/api/match-jd", "/api/interview", "/api/skill-gap", "/api/insights"):
        assert client.post(path, json={}).status_code == 401
