"""
Per-bale view and add-to-cart counters.
"""

import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import ValidationError
from ..models import db, BaleMetric
from ..utils.clock import utcnow

logger = logging.getLogger(__name__)

METRIC_COLUMNS = {
    'view': 'view_count',
    'add_to_cart': 'add_to_cart_count',
}


class MetricsService:

    def track(self, bale_id, metric_type: str) -> dict:
        """
        Increment one counter of a bale, creating its row on first use.
        The increment is a single ``UPDATE ... SET n = n + 1``.
        """
        if not bale_id or not metric_type:
            raise ValidationError("Missing baleId or metricType")
        if metric_type not in METRIC_COLUMNS:
            raise ValidationError('Invalid metricType. Must be "view" or "add_to_cart"')
        try:
            bale_id = int(bale_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid baleId")

        if not self._increment(bale_id, metric_type):
            db.session.add(BaleMetric(
                bale_id=bale_id,
                view_count=1 if metric_type == 'view' else 0,
                add_to_cart_count=1 if metric_type == 'add_to_cart' else 0,
            ))
            try:
                db.session.commit()
            except IntegrityError:
                # another request created the row first
                db.session.rollback()
                self._increment(bale_id, metric_type)
                db.session.commit()
        else:
            db.session.commit()

        logger.info(f"Metric tracked: {metric_type} for bale {bale_id}")
        metric = BaleMetric.query.filter_by(bale_id=bale_id).first()
        return metric.to_dict()

    @staticmethod
    def _increment(bale_id: int, metric_type: str) -> bool:
        column_name = METRIC_COLUMNS[metric_type]
        column = getattr(BaleMetric, column_name)
        result = db.session.execute(
            update(BaleMetric)
            .where(BaleMetric.bale_id == bale_id)
            .values({column_name: column + 1})
        )
        return result.rowcount > 0

    def reset(self) -> int:
        """Zero every counter and stamp the reset date. Returns the number of rows reset."""
        result = db.session.execute(
            update(BaleMetric).values(view_count=0, add_to_cart_count=0, reset_date=utcnow())
        )
        db.session.commit()
        logger.info(f"All bale metrics reset ({result.rowcount} rows)")
        return result.rowcount

    def list_metrics(self):
        metrics = BaleMetric.query.order_by(BaleMetric.view_count.desc(), BaleMetric.bale_id).all()
        return [m.to_dict() for m in metrics]
