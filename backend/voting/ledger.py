# backend/voting/ledger.py

import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from backend import db
from backend.database.models import Candidate, Vote
from backend.errors import AlreadyVotedError, StorageFault, ValidationError
from backend.notifications.notifier import CANDIDATES_UPDATED, VOTE_SUBMITTED

# Append-only vote ledger with one-vote-per-address admission control.
#
# Admission is a single INSERT guarded by the UNIQUE constraint on
# votes.ip_address. There is no separate "has this address voted?" read
# before the write: concurrent casts from one address race on the constraint
# and exactly one of them commits.

logger = logging.getLogger(__name__)


class VoteLedger:
    def __init__(self, notifier):
        self.notifier = notifier

    def cast_vote(self, candidate_id, voter_address):
        """
        Append a vote for `candidate_id` from `voter_address`.

        The candidate is not required to exist. Raises ValidationError for a
        missing candidate id and AlreadyVotedError when the address already
        has a vote. Returns the new vote id.
        """
        if candidate_id in (None, '') or isinstance(candidate_id, bool):
            raise ValidationError("Candidate ID is required")
        if not voter_address:
            raise ValidationError("Voter address is unknown")

        vote = Vote(candidate_id=candidate_id, ip_address=voter_address)
        try:
            db.session.add(vote)
            db.session.commit()
            vote_id = vote.id
        except IntegrityError:
            db.session.rollback()
            logger.info("Rejected duplicate vote from %s", voter_address)
            raise AlreadyVotedError()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to record vote from %s: %s", voter_address, e)
            raise StorageFault(str(e)) from e

        logger.info("Vote %s recorded for candidate %s", vote_id, candidate_id)
        self.notifier.notify(VOTE_SUBMITTED)
        self.notifier.notify(CANDIDATES_UPDATED)
        return vote_id

    def has_voted(self, voter_address):
        try:
            return db.session.query(Vote.id).filter_by(ip_address=voter_address).first() is not None
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to look up vote status for %s: %s", voter_address, e)
            raise StorageFault(str(e)) from e

    def list_votes_detailed(self):
        """Votes whose candidate still exists, newest first."""
        try:
            rows = (
                db.session.query(Vote.ip_address, Candidate.name, Vote.timestamp)
                .join(Candidate, Vote.candidate_id == Candidate.id)
                .order_by(Vote.timestamp.desc(), Vote.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to list votes: %s", e)
            raise StorageFault(str(e)) from e

        return [
            {
                'ip_address': ip_address,
                'candidate_name': candidate_name,
                'timestamp': timestamp.isoformat() if timestamp else None,
            }
            for ip_address, candidate_name, timestamp in rows
        ]

    def total_votes(self):
        try:
            return db.session.query(Vote).count()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to count votes: %s", e)
            raise StorageFault(str(e)) from e
