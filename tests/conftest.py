# tests/conftest.py
import io
import json

import pytest
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient

from resume_insights.core.config import Settings
from resume_insights.main import create_app
from resume_insights.repositories.companies import InMemoryCompanyRepository
from resume_insights.repositories.resumes import InMemoryResumeRepository
from resume_insights.services.auth import create_access_token
from resume_insights.services.container import build_container

OWNER_ID = "user-1"

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"

# legacy Word (OLE compound file) header followed by filler
OLE_BYTES = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504

ASSESSMENT = {
    "atsScore": 78,
    "extractedSkills": ["Python", "FastAPI", "MongoDB", "python"],
    "experience": "4 years of backend development",
    "education": "B.Tech in Computer Science",
    "summary": "Backend engineer focused on APIs",
    "recommendations": ["Add metrics to achievements"],
    "keywords": ["Python", "APIs"],
    "missingKeywords": ["Docker", "Python"],
}

QUESTIONS = {
    "questions": [
        {"question": "How do you design a REST API?", "category": "technical", "difficulty": "hard"},
        {"question": "Tell me about a conflict in your team.", "category": "teamwork", "difficulty": "extreme"},
        {"question": "   "},
    ]
}

RECOMMENDATIONS = {
    "companies": [
        {
            "name": "Acme Analytics",
            "industry": "Technology",
            "size": "medium",
            "location": {"city": "Bengaluru", "state": "Karnataka", "country": "India"},
            "requiredSkills": [
                {"skill": "Python", "importance": "high"},
                {"skill": "React.js", "importance": "medium"},
                {"skill": "Docker", "importance": "low"},
            ],
            "experienceLevel": "mid",
            "matchPercentage": 90,
        },
        {
            "name": "Globex Systems",
            "industry": "Enterprise Software",
            "size": "gigantic",
            "location": {"city": "Pune"},
            "requiredSkills": [{"skill": "Java", "importance": "critical"}],
            "experienceLevel": "principal",
        },
    ]
}


class FakeAdapter:
    """Scripted AI adapter: task -> dict/str response, callable, or exception to raise."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def tasks(self):
        return [task for task, _ in self.calls]

    async def generate(self, task, prompt):
        self.calls.append((task, prompt))
        r = self.responses.get(task)
        if isinstance(r, Exception):
            raise r
        if callable(r):
            r = r(prompt)
        if r is None:
            raise RuntimeError(f"no scripted response for {task}")
        return r if isinstance(r, str) else json.dumps(r)


class DummyS3Client:
    """Records boto3-style calls in memory."""

    def __init__(self, buckets=None):
        self.objects = {}
        self.buckets = set(buckets or ())
        self.fail_delete = False

    def head_bucket(self, Bucket):
        if Bucket not in self.buckets:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadBucket")

    def create_bucket(self, Bucket):
        self.buckets.add(Bucket)
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}

    def put_object(self, Bucket, Key, Body, ContentType=None):
        self.objects[(Bucket, Key)] = (Body, ContentType)
        return {"ETag": '"dummy-etag"'}

    def get_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)][0])}

    def delete_object(self, Bucket, Key):
        if self.fail_delete:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObject")
        self.objects.pop((Bucket, Key), None)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}


def make_pdf(text: str) -> bytes:
    """Single-page PDF with one line of Helvetica text and a correct xref table."""
    content = ("BT /F1 12 Tf 72 720 Td (%s) Tj ET" % text).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


def make_docx(*paragraphs: str) -> bytes:
    from docx import Document

    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        STORE_BACKEND="memory",
        LOCAL_UPLOAD_DIR=str(tmp_path / "uploads"),
        LLM_ADAPTER="mock",
        INTERVIEW_QUESTION_COUNT=5,
    )


@pytest.fixture
def adapter():
    return FakeAdapter({
        "assess": ASSESSMENT,
        "interview_questions": QUESTIONS,
        "recommend_companies": RECOMMENDATIONS,
    })


@pytest.fixture
def resumes():
    return InMemoryResumeRepository()


@pytest.fixture
def companies():
    return InMemoryCompanyRepository()


@pytest.fixture
def services(settings, resumes, companies, adapter):
    return build_container(settings, resumes, companies, adapter)


@pytest.fixture
def token():
    return create_access_token(OWNER_ID)


@pytest.fixture
def app(services):
    return create_app(services)


@pytest.fixture
async def client(app, token):
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://testserver",
        headers={"Authorization": f"Bearer {token}"},
    ) as ac:
        yield ac
