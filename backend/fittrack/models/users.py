from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

ROLES = ("admin", "manager", "tailor", "customer")


class User(db.Model):
    """
    Staff member or customer login.

    Role is the only authorization dimension; branch tags the location a
    staff member works at and becomes the default branch of what they create.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default="tailor", index=True)
    branch = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "branch": self.branch,
            "created_at": to_utc_z(self.created_at),
        }
