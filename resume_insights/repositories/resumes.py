# resume_insights/repositories/resumes.py
import abc
from typing import Dict, List, Optional, Tuple

from resume_insights.db.mongo import RESUMES_COLLECTION
from resume_insights.models.resume import ResumeRecord
from resume_insights.services.history_query import ResumeHistoryQuery, mongo_sort, sort_records


def _to_doc(record: ResumeRecord) -> dict:
    doc = record.model_dump()
    doc["_id"] = doc.pop("id")
    return doc


def _from_doc(doc) -> Optional[ResumeRecord]:
    # convert Mongo's _id to id when returning
    if not doc:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return ResumeRecord.model_validate(doc)


class ResumeRepository(abc.ABC):
    @abc.abstractmethod
    async def create(self, record: ResumeRecord) -> ResumeRecord: ...

    @abc.abstractmethod
    async def get(self, resume_id: str) -> Optional[ResumeRecord]: ...

    @abc.abstractmethod
    async def update(self, record: ResumeRecord) -> ResumeRecord: ...

    @abc.abstractmethod
    async def search(self, query: ResumeHistoryQuery, skip: int = 0, limit: int = 10) -> Tuple[List[ResumeRecord], int]: ...

    async def find_owned(self, resume_id: str, owner_id: str, active_only: bool = True) -> Optional[ResumeRecord]:
        record = await self.get(resume_id)
        if record is None or record.owner_id != owner_id:
            return None
        if active_only and not record.is_active:
            return None
        return record


class MongoResumeRepository(ResumeRepository):
    def __init__(self, db):
        self.collection = db[RESUMES_COLLECTION]

    async def create(self, record: ResumeRecord) -> ResumeRecord:
        await self.collection.insert_one(_to_doc(record))
        return record

    async def get(self, resume_id: str) -> Optional[ResumeRecord]:
        return _from_doc(await self.collection.find_one({"_id": resume_id}))

    async def update(self, record: ResumeRecord) -> ResumeRecord:
        doc = _to_doc(record)
        doc.pop("_id")
        # owner_id and uploaded_at are set once
        doc.pop("owner_id")
        doc.pop("uploaded_at")
        await self.collection.update_one({"_id": record.id}, {"$set": doc})
        return record

    async def search(self, query: ResumeHistoryQuery, skip: int = 0, limit: int = 10) -> Tuple[List[ResumeRecord], int]:
        flt = query.to_mongo_filter()
        cur = self.collection.find(flt).sort(mongo_sort(query.sort)).skip(skip).limit(limit)
        out = []
        async for d in cur:
            out.append(_from_doc(d))
        total = await self.collection.count_documents(flt)
        return out, total


class InMemoryResumeRepository(ResumeRepository):
    """Dict-backed repository for tests and STORE_BACKEND=memory."""

    def __init__(self):
        self._store: Dict[str, ResumeRecord] = {}

    async def create(self, record: ResumeRecord) -> ResumeRecord:
        self._store[record.id] = record.model_copy(deep=True)
        return record

    async def get(self, resume_id: str) -> Optional[ResumeRecord]:
        r = self._store.get(resume_id)
        return r.model_copy(deep=True) if r else None

    async def update(self, record: ResumeRecord) -> ResumeRecord:
        existing = self._store.get(record.id)
        if existing is None:
            return record
        self._store[record.id] = record.model_copy(
            deep=True, update={"owner_id": existing.owner_id, "uploaded_at": existing.uploaded_at}
        )
        return record

    async def search(self, query: ResumeHistoryQuery, skip: int = 0, limit: int = 10) -> Tuple[List[ResumeRecord], int]:
        matched = [r for r in self._store.values() if query.matches(r)]
        ordered = sort_records(matched, query.sort)
        page = [r.model_copy(deep=True) for r in ordered[skip:skip + limit]]
        return page, len(matched)
