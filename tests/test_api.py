# tests/test_api.py
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from resume_insights.services.auth import create_access_token

from conftest import DOCX_MIME, PDF_MIME, make_docx, make_pdf


async def _upload(client, data=None, name="resume.pdf", mime=PDF_MIME, job_description=None):
    data = data if data is not None else make_pdf("Python FastAPI MongoDB developer")
    form = {"job_description": job_description} if job_description else None
    return await client.post("/api/v1/resumes/upload", files={"resume": (name, data, mime)}, data=form)


@pytest.mark.asyncio
async def test_upload_resume(client):
    resp = await _upload(client, job_description="Backend engineer")
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Resume uploaded successfully"
    assert body["analysis_state"] == "succeeded"
    assert body["warning"] is None
    assert body["resume"]["original_name"] == "resume.pdf"
    assert body["resume"]["ats_score"] == 78
    assert body["resume"]["declared_format"] == "pdf"


@pytest.mark.asyncio
async def test_upload_with_failed_analysis_is_still_created(client, adapter):
    adapter.responses["assess"] = RuntimeError("down")
    resp = await _upload(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["analysis_state"] == "failed"
    assert body["warning"] == "Resume saved, but AI analysis is currently unavailable"
    assert body["resume"]["is_analyzed"] is False


@pytest.mark.asyncio
async def test_upload_rejections(client):
    resp = await client.post("/api/v1/resumes/upload", data={"job_description": "JD"})
    assert resp.status_code == 400
    assert resp.json()["kind"] == "MissingFile"

    pdf = make_pdf("one")
    resp = await client.post("/api/v1/resumes/upload", files=[
        ("resume", ("a.pdf", pdf, PDF_MIME)),
        ("resume", ("b.pdf", pdf, PDF_MIME)),
    ])
    assert resp.status_code == 400
    assert resp.json()["kind"] == "TooManyFiles"

    resp = await _upload(client, data=b"hello", name="notes.txt", mime="text/plain")
    assert resp.status_code == 400
    body = resp.json()
    assert body == {"success": False, "message": body["message"], "kind": "UnsupportedType"}

    resp = await _upload(client, data=b"%PDF" + b"0" * (3 * 1024 * 1024))
    assert resp.status_code == 400
    assert resp.json()["kind"] == "TooLarge"


@pytest.mark.asyncio
async def test_auth_required(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        resp = await ac.get("/api/v1/resumes/history")
        assert resp.status_code in (401, 403)

        resp = await ac.get("/api/v1/resumes/history", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

        expired = create_access_token("user-1", expires_delta=timedelta(minutes=-5))
        resp = await ac.get("/api/v1/resumes/history", headers={"Authorization": f"Bearer {expired}"})
        assert resp.status_code == 401


@pytest.mark.asyncio
async def test_history_detail_and_delete(client):
    first = (await _upload(client)).json()["resume"]
    data = make_docx("Jane Doe", "Python")
    await _upload(client, data=data, name="jane.docx", mime=DOCX_MIME)

    resp = await client.get("/api/v1/resumes/history", params={"limit": 1, "page": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"]["total_items"] == 2
    assert body["pagination"]["has_prev_page"] is True
    assert len(body["resumes"]) == 1

    resp = await client.get("/api/v1/resumes/history", params={"declared_format": "docx"})
    assert [r["original_name"] for r in resp.json()["resumes"]] == ["jane.docx"]

    resp = await client.get("/api/v1/resumes/history", params={"sort_by": "password"})
    assert resp.status_code == 400

    resp = await client.get(f"/api/v1/resumes/{first['id']}")
    assert resp.status_code == 200
    detail = resp.json()["resume"]
    assert "storage_location" not in detail
    assert detail["analysis"]["ats_score"] == 78

    # another owner cannot see it
    other = create_access_token("user-2")
    resp = await client.get(f"/api/v1/resumes/{first['id']}", headers={"Authorization": f"Bearer {other}"})
    assert resp.status_code == 404

    resp = await client.delete(f"/api/v1/resumes/{first['id']}")
    assert resp.status_code == 200
    assert (await client.get(f"/api/v1/resumes/{first['id']}")).status_code == 404
    resp = await client.get("/api/v1/resumes/history")
    assert resp.json()["pagination"]["total_items"] == 1


@pytest.mark.asyncio
async def test_reanalyze(client, adapter):
    resume_id = (await _upload(client)).json()["resume"]["id"]

    resp = await client.post("/api/v1/resumes/analyze", json={"resume_id": resume_id, "job_description": "SRE role"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["analysis_state"] == "succeeded"
    assert len(body["interview_questions"]) == 2

    adapter.responses["assess"] = RuntimeError("down")
    body = (await client.post("/api/v1/resumes/analyze", json={"resume_id": resume_id})).json()
    assert body["success"] is False
    assert body["analysis_state"] == "failed"

    resp = await client.post("/api/v1/resumes/analyze", json={"resume_id": "64b7f0000000000000000000"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_company_flow(client):
    resp = await client.post("/api/v1/companies/match", json={"skills": ["Python", "React"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_companies"] == 2
    assert [(c["name"], c["match_percentage"]) for c in body["companies"]] == [
        ("Acme Analytics", 67), ("Globex Systems", 0),
    ]
    acme_id = body["companies"][0]["id"]

    resp = await client.get("/api/v1/companies/search", params={"skills": "java"})
    assert [c["name"] for c in resp.json()["companies"]] == ["Globex Systems"]

    assert (await client.get("/api/v1/companies/industries")).json()["industries"] == [
        "Enterprise Software", "Technology",
    ]
    assert (await client.get("/api/v1/companies/locations")).json()["locations"] == ["Bengaluru", "Pune"]

    resp = await client.get(f"/api/v1/companies/{acme_id}")
    assert resp.status_code == 200
    assert resp.json()["company"]["name"] == "Acme Analytics"

    resp = await client.post(f"/api/v1/companies/{acme_id}/rate", json={"rating": 4})
    assert resp.status_code == 200
    assert resp.json()["company"]["rating"] == 4.0
    resp = await client.post(f"/api/v1/companies/{acme_id}/rate", json={"rating": 5})
    assert resp.json()["company"]["rating"] == 4.5
    assert resp.json()["company"]["review_count"] == 2

    resp = await client.post(f"/api/v1/companies/{acme_id}/rate", json={"rating": 7})
    assert resp.status_code == 400
    assert (await client.get("/api/v1/companies/nope")).status_code == 404


@pytest.mark.asyncio
async def test_match_request_validation(client):
    resp = await client.post("/api/v1/companies/match", json={"skills": []})
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    resp = await client.post("/api/v1/companies/match", json={"skills": ["Python"], "experience_level": "guru"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_match_by_resume(client, adapter):
    adapter.responses["assess"] = RuntimeError("down")
    resume_id = (await _upload(client)).json()["resume"]["id"]
    resp = await client.post("/api/v1/companies/match", json={"resume_id": resume_id})
    assert resp.status_code == 400

    adapter.responses["assess"] = {"atsScore": 80, "extractedSkills": ["Java"]}
    await client.post("/api/v1/resumes/analyze", json={"resume_id": resume_id})
    resp = await client.post("/api/v1/companies/match", json={"resume_id": resume_id})
    assert resp.status_code == 200
    assert resp.json()["companies"][0]["name"] == "Globex Systems"


@pytest.mark.asyncio
async def test_ai_outage_on_match_is_bad_gateway(client, adapter):
    adapter.responses["recommend_companies"] = RuntimeError("down")
    resp = await client.post("/api/v1/companies/match", json={"skills": ["Python"]})
    assert resp.status_code == 502
