# backend/database/models.py

from backend import db
from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Candidate(db.Model):
    __tablename__ = 'candidates'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(2048), nullable=False, default='')  # symbol token or image reference
    image_url = db.Column(db.String(2048), nullable=False, default='')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'image_url': self.image_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Candidate {self.id} {self.name!r}>'


class Vote(db.Model):
    __tablename__ = 'votes'
    id = db.Column(db.Integer, primary_key=True)
    # No foreign key: votes for a deleted candidate stay in the ledger
    candidate_id = db.Column(db.Integer, nullable=False, index=True)
    # One vote per network address, enforced by the database
    ip_address = db.Column(db.String(64), unique=True, nullable=False)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f'<Vote {self.id} for Candidate {self.candidate_id} from {self.ip_address}>'
