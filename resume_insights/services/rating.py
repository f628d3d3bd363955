# resume_insights/services/rating.py
"""
Running mean rating per company.

Each call counts as one independent vote; votes are not deduplicated per user.
The read-modify-write in rate_company is not atomic, so two concurrent votes on
the same company can lose one update.
"""

import logging
import math

from resume_insights.core.errors import InvalidRating, NotFoundError
from resume_insights.models.company import Company
from resume_insights.models.resume import utcnow
from resume_insights.services.skill_matcher import round_half_up

logger = logging.getLogger(__name__)

MIN_RATING = 1.0
MAX_RATING = 5.0


def apply_rating(company: Company, new_rating: float) -> Company:
    try:
        value = float(new_rating)
    except (TypeError, ValueError):
        raise InvalidRating("Rating must be a number between 1 and 5")
    if math.isnan(value) or not (MIN_RATING <= value <= MAX_RATING):
        raise InvalidRating("Rating must be between 1 and 5")

    count = company.review_count + 1
    mean = (company.rating * company.review_count + value) / count
    return company.model_copy(update={
        "rating": round_half_up(mean, 1),
        "review_count": count,
        "updated_at": utcnow(),
    })


async def rate_company(repository, company_id: str, new_rating: float) -> Company:
    company = await repository.get(company_id)
    if company is None or not company.is_active:
        raise NotFoundError("Company not found")
    updated = apply_rating(company, new_rating)
    await repository.update(updated)
    logger.info("Company %s rated %.1f -> %.1f (%d reviews)", company_id, float(new_rating),
                updated.rating, updated.review_count)
    return updated
