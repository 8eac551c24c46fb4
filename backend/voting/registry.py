# backend/voting/registry.py

import logging
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from backend import db
from backend.database.models import Candidate, Vote
from backend.errors import NotFoundError, StorageFault, ValidationError
from backend.notifications.notifier import CANDIDATES_UPDATED

# Candidate roster CRUD. Every successful mutation commits first and only then
# notifies observers, so a client that re-fetches on the event sees the change.

logger = logging.getLogger(__name__)


class CandidateRegistry:
    def __init__(self, notifier, max_candidates=0):
        """
        notifier: ChangeNotifier (or anything with notify(event_kind))
        max_candidates: roster size limit; 0 disables the limit
        """
        self.notifier = notifier
        self.max_candidates = max_candidates

    def list_candidates(self):
        try:
            rows = (
                db.session.query(Candidate, func.count(Vote.id).label('vote_count'))
                .outerjoin(Vote, Vote.candidate_id == Candidate.id)
                .group_by(Candidate.id)
                .order_by(Candidate.name.asc(), Candidate.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fault('list candidates', e) from e

        candidates = []
        for candidate, vote_count in rows:
            record = candidate.to_dict()
            record['vote_count'] = vote_count
            candidates.append(record)
        return candidates

    def get_candidate(self, candidate_id):
        try:
            candidate = db.session.get(Candidate, candidate_id)
        except SQLAlchemyError as e:
            raise self._fault('load candidate', e) from e
        if candidate is None:
            raise NotFoundError(f"Candidate {candidate_id} not found")
        return candidate

    def add_candidate(self, name, description='', image_url=''):
        name = (name or '').strip()
        if not name:
            raise ValidationError("Candidate name is required")

        if self.max_candidates and self._roster_size() >= self.max_candidates:
            raise ValidationError(f"The ballot is full ({self.max_candidates} candidates)")

        try:
            candidate = Candidate(name=name, description=description or '', image_url=image_url or '')
            db.session.add(candidate)
            db.session.commit()
            created = candidate.to_dict()
        except SQLAlchemyError as e:
            raise self._fault('add candidate', e) from e

        logger.info("Candidate %s added: %s", created['id'], created['name'])
        self.notifier.notify(CANDIDATES_UPDATED)
        return created

    def update_candidate(self, candidate_id, name, description='', image_url=''):
        name = (name or '').strip()
        candidate = self.get_candidate(candidate_id)
        if not name:
            raise ValidationError("Candidate name is required")

        try:
            candidate.name = name
            candidate.description = description or ''
            candidate.image_url = image_url or ''
            db.session.commit()
            updated = candidate.to_dict()
        except SQLAlchemyError as e:
            raise self._fault('update candidate', e) from e

        logger.info("Candidate %s updated", candidate_id)
        self.notifier.notify(CANDIDATES_UPDATED)
        return updated

    def delete_candidate(self, candidate_id):
        """Remove a candidate; votes cast for it are left in the ledger. Returns rows removed."""
        try:
            changes = db.session.query(Candidate).filter_by(id=candidate_id).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            raise self._fault('delete candidate', e) from e

        logger.info("Candidate %s delete removed %d row(s)", candidate_id, changes)
        self.notifier.notify(CANDIDATES_UPDATED)
        return changes

    def _roster_size(self):
        try:
            return db.session.query(Candidate).count()
        except SQLAlchemyError as e:
            raise self._fault('count candidates', e) from e

    def _fault(self, action, error):
        db.session.rollback()
        logger.error("Failed to %s: %s", action, error)
        return StorageFault(str(error))
