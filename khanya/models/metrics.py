# khanya/models/metrics.py
from . import db


class BaleMetric(db.Model):
    __tablename__ = "bale_metrics"

    id = db.Column(db.Integer, primary_key=True)
    bale_id = db.Column(db.Integer, unique=True, nullable=False)
    view_count = db.Column(db.Integer, nullable=False, default=0)
    add_to_cart_count = db.Column(db.Integer, nullable=False, default=0)
    reset_date = db.Column(db.DateTime)

    def to_dict(self):
        return {
            "bale_id": self.bale_id,
            "view_count": int(self.view_count or 0),
            "add_to_cart_count": int(self.add_to_cart_count or 0),
            "reset_date": self.reset_date.isoformat() if self.reset_date else None,
        }
