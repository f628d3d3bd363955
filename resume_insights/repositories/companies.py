# resume_insights/repositories/companies.py
import abc
from typing import Dict, List, Optional, Tuple

from resume_insights.db.mongo import COMPANIES_COLLECTION
from resume_insights.models.company import Company
from resume_insights.services.history_query import CompanySearchQuery, mongo_sort, sort_records

DISTINCT_FIELDS = ("industry", "location.city")


def _to_doc(company: Company) -> dict:
    doc = company.model_dump()
    doc["_id"] = doc.pop("id")
    return doc


def _from_doc(doc) -> Optional[Company]:
    if not doc:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return Company.model_validate(doc)


class CompanyRepository(abc.ABC):
    @abc.abstractmethod
    async def create(self, company: Company) -> Company: ...

    @abc.abstractmethod
    async def get(self, company_id: str) -> Optional[Company]: ...

    @abc.abstractmethod
    async def find_by_name(self, name: str) -> Optional[Company]:
        """Exact, case-sensitive name lookup. Returns the earliest inserted match."""

    @abc.abstractmethod
    async def update(self, company: Company) -> Company: ...

    @abc.abstractmethod
    async def search(self, query: CompanySearchQuery, skip: int = 0, limit: int = 10) -> Tuple[List[Company], int]: ...

    @abc.abstractmethod
    async def distinct(self, field: str) -> List[str]:
        """Sorted distinct non-empty values of `field` over active companies."""

    @abc.abstractmethod
    async def list_active(self) -> List[Company]: ...


class MongoCompanyRepository(CompanyRepository):
    def __init__(self, db):
        self.collection = db[COMPANIES_COLLECTION]

    async def create(self, company: Company) -> Company:
        await self.collection.insert_one(_to_doc(company))
        return company

    async def get(self, company_id: str) -> Optional[Company]:
        return _from_doc(await self.collection.find_one({"_id": company_id}))

    async def find_by_name(self, name: str) -> Optional[Company]:
        cur = self.collection.find({"name": name}).sort([("created_at", 1), ("_id", 1)]).limit(1)
        async for d in cur:
            return _from_doc(d)
        return None

    async def update(self, company: Company) -> Company:
        doc = _to_doc(company)
        doc.pop("_id")
        await self.collection.update_one({"_id": company.id}, {"$set": doc})
        return company

    async def search(self, query: CompanySearchQuery, skip: int = 0, limit: int = 10) -> Tuple[List[Company], int]:
        flt = query.to_mongo_filter()
        cur = self.collection.find(flt).sort(mongo_sort(query.sort)).skip(skip).limit(limit)
        out = []
        async for d in cur:
            out.append(_from_doc(d))
        total = await self.collection.count_documents(flt)
        return out, total

    async def distinct(self, field: str) -> List[str]:
        if field not in DISTINCT_FIELDS:
            raise ValueError(f"distinct not supported for {field}")
        values = await self.collection.distinct(field, {"is_active": True, field: {"$exists": True, "$nin": [None, ""]}})
        return sorted(values)

    async def list_active(self) -> List[Company]:
        cur = self.collection.find({"is_active": True}).sort([("created_at", 1), ("_id", 1)])
        return [_from_doc(d) async for d in cur]


class InMemoryCompanyRepository(CompanyRepository):
    """Dict-backed repository for tests and STORE_BACKEND=memory. Preserves insertion order."""

    def __init__(self):
        self._store: Dict[str, Company] = {}

    async def create(self, company: Company) -> Company:
        self._store[company.id] = company.model_copy(deep=True)
        return company

    async def get(self, company_id: str) -> Optional[Company]:
        c = self._store.get(company_id)
        return c.model_copy(deep=True) if c else None

    async def find_by_name(self, name: str) -> Optional[Company]:
        for c in self._store.values():
            if c.name == name:
                return c.model_copy(deep=True)
        return None

    async def update(self, company: Company) -> Company:
        if company.id in self._store:
            self._store[company.id] = company.model_copy(deep=True)
        return company

    async def search(self, query: CompanySearchQuery, skip: int = 0, limit: int = 10) -> Tuple[List[Company], int]:
        matched = [c for c in self._store.values() if query.matches(c)]
        ordered = sort_records(matched, query.sort)
        return [c.model_copy(deep=True) for c in ordered[skip:skip + limit]], len(matched)

    async def distinct(self, field: str) -> List[str]:
        if field not in DISTINCT_FIELDS:
            raise ValueError(f"distinct not supported for {field}")
        values = set()
        for c in self._store.values():
            if not c.is_active:
                continue
            v = c.location.city if field == "location.city" else c.industry
            if v:
                values.add(v)
        return sorted(values)

    async def list_active(self) -> List[Company]:
        return [c.model_copy(deep=True) for c in self._store.values() if c.is_active]
