# khanya/models/legacy.py
# Tables of the legacy MySQL catalog, reached through the "legacy" bind.
from . import db


def _money(value) -> float:
    return float(value) if value is not None else 0.0


class Category(db.Model):
    __bind_key__ = "legacy"
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, default="")
    icon_name = db.Column(db.String(64))
    display_order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "icon_name": self.icon_name,
            "display_order": self.display_order,
        }


class Product(db.Model):
    __bind_key__ = "legacy"
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    image_path = db.Column(db.String(512))
    image_alt_text = db.Column(db.String(255))
    quantity_per_10kg = db.Column(db.Integer, default=0)
    price_per_10kg = db.Column(db.Numeric(10, 2), default=0)
    price_per_piece = db.Column(db.Numeric(10, 2), default=0)
    age_range = db.Column(db.String(64))
    display_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        return {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description or "",
            "image_path": self.image_path,
            "image_alt_text": self.image_alt_text,
            "quantity_per_10kg": self.quantity_per_10kg,
            "price_per_10kg": _money(self.price_per_10kg),
            "price_per_piece": _money(self.price_per_piece),
            "age_range": self.age_range,
            "display_order": self.display_order,
            "is_active": bool(self.is_active),
        }


class ProductImage(db.Model):
    __bind_key__ = "legacy"
    __tablename__ = "product_images"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, nullable=False, index=True)
    image_path = db.Column(db.String(512), nullable=False)
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "image_path": self.image_path,
            "is_primary": bool(self.is_primary),
            "display_order": self.display_order,
        }
