# khanya/models/user.py
from . import db


class UserRole(db.Model):
    __tablename__ = "user_roles"
    __table_args__ = (db.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    role = db.Column(db.String(32), nullable=False, default="user")

    @classmethod
    def has_role(cls, user_id: str, role: str) -> bool:
        return cls.query.filter_by(user_id=user_id, role=role).first() is not None
