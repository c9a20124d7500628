"""Database models for the party check-in app (local fallback when Supabase is off)."""

from __future__ import annotations

from sqlalchemy import func

from extensions import db


class Registration(db.Model):
    """A ticket holder for one party; ``ticket_token`` is what the QR code carries."""

    __tablename__ = "registrations"

    id = db.Column(db.Integer, primary_key=True)
    party_slug = db.Column(db.String(120), index=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    andrew_id = db.Column(db.String(64), index=True, nullable=False)
    organization = db.Column(db.String(120), nullable=True)
    status = db.Column(db.String(20), default="confirmed", nullable=False)
    ticket_token = db.Column(db.String(64), unique=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    STATUS_CONFIRMED = "confirmed"
    STATUS_WAITLIST = "waitlist"

    @property
    def has_ticket(self) -> bool:
        return self.status == self.STATUS_CONFIRMED

    def to_ticket_holder(self) -> dict:
        return {"name": self.name, "andrew_id": self.andrew_id}

    def __repr__(self) -> str:  # pragma: no cover - helper for shell debugging
        return f"<Registration id={self.id} party={self.party_slug!r} andrew_id={self.andrew_id!r}>"

