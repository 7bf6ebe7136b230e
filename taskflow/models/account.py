"""
Taskflow
Account models — user accounts and the group catalogue.

Group membership is the only authorization primitive. Each account stores
its groups as a comma-joined column; the ``groups`` property parses it once
on read and serialises once on write so callers always see a list.
"""

from datetime import datetime, timezone

from taskflow.models import db
from taskflow.utils.helpers import join_groups, split_groups

ADMIN_USERNAME = "admin"
ADMIN_GROUP = "Admin"


class UserGroup(db.Model):
    __tablename__ = "user_groups"

    name = db.Column(db.String(50), primary_key=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {"name": self.name}


class Account(db.Model):
    __tablename__ = "accounts"

    username = db.Column(db.String(50), primary_key=True)
    email = db.Column(db.String(200), unique=True, nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)
    usergroups = db.Column(db.Text, default="")
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def groups(self) -> list[str]:
        return split_groups(self.usergroups)

    @groups.setter
    def groups(self, value):
        self.usergroups = join_groups(value)

    @property
    def is_builtin_admin(self) -> bool:
        return (self.username or "").strip().lower() == ADMIN_USERNAME

    def to_dict(self):
        return {
            "username": self.username,
            "email": self.email,
            "active": bool(self.active),
            "groups": self.groups,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Account {self.username}>"
