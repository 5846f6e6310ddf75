# khanya/models/catalog.py
from . import db


def _money(value) -> float:
    return float(value) if value is not None else 0.0


class ProductCategory(db.Model):
    __tablename__ = "product_categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, default="")

    def to_dict(self):
        return {"id": self.id, "name": self.name, "description": self.description or ""}


class StockItem(db.Model):
    __tablename__ = "stock_items"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    age_range = db.Column(db.String(64))
    selling_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    stock_on_hand = db.Column(db.Integer, nullable=False, default=0)

    images = db.relationship(
        "StockItemImage", backref="stock_item", lazy=True,
        order_by="StockItemImage.display_order", cascade="all, delete-orphan",
    )

    def to_dict(self, include_images: bool = False):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "age_range": self.age_range,
            "selling_price": _money(self.selling_price),
            "stock_on_hand": int(self.stock_on_hand or 0),
        }
        if include_images:
            data["images"] = [img.to_dict() for img in self.images]
        return data


class StockItemImage(db.Model):
    __tablename__ = "stock_item_images"

    id = db.Column(db.Integer, primary_key=True)
    stock_item_id = db.Column(db.Integer, db.ForeignKey("stock_items.id"), nullable=False, index=True)
    image_url = db.Column(db.String(512), nullable=False)
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "image_url": self.image_url,
            "is_primary": bool(self.is_primary),
            "display_order": self.display_order,
        }


class Bale(db.Model):
    __tablename__ = "bales"

    id = db.Column(db.Integer, primary_key=True)
    bale_number = db.Column(db.String(32))
    description = db.Column(db.Text, default="")
    actual_selling_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    recommended_sale_price = db.Column(db.Numeric(10, 2), default=0)
    total_cost_price = db.Column(db.Numeric(10, 2), default=0)
    bale_profit = db.Column(db.Numeric(10, 2), default=0)
    bale_margin_percentage = db.Column(db.Numeric(6, 2), default=0)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    active = db.Column(db.Boolean, nullable=False, default=True)
    quantity_in_stock = db.Column(db.Integer, nullable=False, default=0)
    product_category_id = db.Column(db.Integer, db.ForeignKey("product_categories.id"))

    product_category = db.relationship("ProductCategory", backref="bales", lazy=True)
    bale_items = db.relationship(
        "BaleItem", backref="bale", lazy=True, order_by="BaleItem.id",
        cascade="all, delete-orphan",
    )

    def is_in_stock(self) -> bool:
        """A bale can be sold only if every stock item covers the quantity it needs."""
        if not self.bale_items:
            return False
        return all(
            bi.stock_item is not None and (bi.stock_item.stock_on_hand or 0) >= bi.quantity
            for bi in self.bale_items
        )

    def to_dict(self):
        return {
            "id": self.id,
            "bale_number": self.bale_number,
            "description": self.description or "",
            "actual_selling_price": _money(self.actual_selling_price),
            "recommended_sale_price": _money(self.recommended_sale_price),
            "total_cost_price": _money(self.total_cost_price),
            "bale_profit": _money(self.bale_profit),
            "bale_margin_percentage": _money(self.bale_margin_percentage),
            "display_order": self.display_order,
            "active": bool(self.active),
            "product_category_id": self.product_category_id,
            "quantity_in_stock": int(self.quantity_in_stock or 0),
        }


class BaleItem(db.Model):
    __tablename__ = "bale_items"

    id = db.Column(db.Integer, primary_key=True)
    bale_id = db.Column(db.Integer, db.ForeignKey("bales.id"), nullable=False, index=True)
    stock_item_id = db.Column(db.Integer, db.ForeignKey("stock_items.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    line_item_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    stock_item = db.relationship("StockItem", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "quantity": self.quantity,
            "line_item_price": _money(self.line_item_price),
            "stock_item": self.stock_item.to_dict(include_images=True) if self.stock_item else {},
        }
