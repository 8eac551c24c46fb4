# backend/voting/results.py

import logging
from dataclasses import asdict, dataclass
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from backend import db
from backend.database.models import Candidate, Vote
from backend.errors import StorageFault

logger = logging.getLogger(__name__)


@dataclass
class ResultRow:
    id: int
    name: str
    description: str
    image_url: str
    vote_count: int
    percentage: float = 0.0

    def to_dict(self):
        return asdict(self)


def vote_percentage(count: int, total: int) -> float:
    """Share of `total` as a percentage rounded to one decimal; 0.0 when nothing was cast."""
    if total <= 0:
        return 0.0
    return round(count / total * 100, 1)


class ResultsAggregator:
    """Derives tallies from the ledger on every read; nothing is cached or stored."""

    def compute_results(self) -> List[ResultRow]:
        vote_count = func.count(Vote.id)
        try:
            rows = (
                db.session.query(Candidate, vote_count.label('vote_count'))
                .outerjoin(Vote, Vote.candidate_id == Candidate.id)
                .group_by(Candidate.id)
                .order_by(vote_count.desc(), Candidate.name.asc(), Candidate.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to compute results: %s", e)
            raise StorageFault(str(e)) from e

        results = [
            ResultRow(
                id=candidate.id,
                name=candidate.name,
                description=candidate.description,
                image_url=candidate.image_url,
                vote_count=count,
            )
            for candidate, count in rows
        ]
        total = sum(row.vote_count for row in results)
        for row in results:
            row.percentage = vote_percentage(row.vote_count, total)
        return results

    def summary(self) -> List[Tuple[str, int]]:
        return [(row.name, row.vote_count) for row in self.compute_results()]
