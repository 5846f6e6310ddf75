# khanya/models/verification.py
from . import db
from ..utils.clock import utcnow


class EmailVerification(db.Model):
    """One row per PIN request; never reused or overwritten."""

    __tablename__ = "email_verifications"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), index=True)
    phone = db.Column(db.String(32), index=True)
    pin_code = db.Column(db.String(6), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    verified = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<EmailVerification id={self.id} email={self.email!r} phone={self.phone!r}>"
