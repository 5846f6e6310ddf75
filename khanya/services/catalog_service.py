"""
Catalog queries and admin CRUD over categories, products, images, bales and stock items.
"""

import logging
from decimal import Decimal, InvalidOperation

from ..errors import NotFound, ValidationError
from ..models import (
    db, Bale, BaleItem, Category, Product, ProductCategory, ProductImage, StockItem,
)

logger = logging.getLogger(__name__)

ACTIONS = ('list', 'create', 'update', 'delete')

# entity -> (model, label, list key, writable fields, fields required on create)
ENTITIES = {
    'categories': (
        Category, 'Category', 'categories',
        ('name', 'description', 'icon_name', 'display_order'),
        ('name',),
    ),
    'products': (
        Product, 'Product', 'products',
        ('category_id', 'name', 'description', 'image_path', 'image_alt_text',
         'quantity_per_10kg', 'price_per_10kg', 'price_per_piece', 'age_range',
         'display_order', 'is_active'),
        ('category_id', 'name'),
    ),
    'product_images': (
        ProductImage, 'Image', 'images',
        ('product_id', 'image_path', 'is_primary', 'display_order'),
        ('product_id', 'image_path'),
    ),
    'bales': (
        Bale, 'Bale', 'bales',
        ('bale_number', 'description', 'actual_selling_price', 'recommended_sale_price',
         'total_cost_price', 'bale_profit', 'bale_margin_percentage', 'display_order',
         'active', 'quantity_in_stock', 'product_category_id'),
        (),
    ),
    'stock_items': (
        StockItem, 'Stock item', 'stock_items',
        ('name', 'description', 'age_range', 'selling_price', 'stock_on_hand'),
        ('name',),
    ),
    'product_categories': (
        ProductCategory, 'Product category', 'product_categories',
        ('name', 'description'),
        ('name',),
    ),
    'bale_items': (
        BaleItem, 'Bale item', 'bale_items',
        ('bale_id', 'stock_item_id', 'quantity', 'line_item_price'),
        ('bale_id', 'stock_item_id', 'quantity'),
    ),
}

# image metadata only; the file path is fixed once uploaded
UPDATE_ONLY = {'product_images': ('is_primary', 'display_order')}


def _coerce(model, field: str, value):
    if value is None:
        return None
    python_type = model.__table__.columns[field].type.python_type
    try:
        if python_type is bool:
            if isinstance(value, str):
                return value.strip().lower() not in ('', '0', 'false', 'no')
            return bool(value)
        if python_type is int:
            return int(value)
        if python_type is Decimal:
            return Decimal(str(value))
        return str(value)
    except (TypeError, ValueError, InvalidOperation):
        raise ValidationError(f"Invalid value for {field}")


def _parent_id(payload: dict, key: str, label: str) -> int:
    try:
        return int(payload.get(key))
    except (TypeError, ValueError):
        raise ValidationError(f"{label} ID required")


class CatalogService:

    # -- storefront reads -------------------------------------------------

    def get_bales(self):
        """Active bales with category, items, stock item images and stock availability."""
        bales = (
            Bale.query
            .filter(Bale.active.is_(True))
            .order_by(Bale.display_order.asc(), Bale.id.asc())
            .all()
        )
        out = []
        for bale in bales:
            data = bale.to_dict()
            data['product_category'] = bale.product_category.to_dict() if bale.product_category else {}
            data['bale_items'] = [bi.to_dict() for bi in bale.bale_items]
            data['in_stock'] = bale.is_in_stock()
            out.append(data)
        return out

    def get_bale_products(self) -> dict:
        categories = Category.query.order_by(Category.id).all()
        products = Product.query.order_by(Product.category_id, Product.id).all()
        logger.info(f"Fetched {len(categories)} categories and {len(products)} products")
        return {
            'categories': [c.to_dict() for c in categories],
            'products': [p.to_dict() for p in products],
        }

    # -- admin CRUD -------------------------------------------------------

    def manage(self, entity: str, payload: dict) -> dict:
        """
        Dispatch an admin ``action`` (list, create, update, delete) on one entity.

        Returns:
            dict: response fields besides ``success``
        """
        model, label, list_key, fields, required = ENTITIES[entity]
        action = payload.get('action')
        if action not in ACTIONS:
            raise ValidationError("Method not allowed")

        if action == 'list':
            return {list_key: [row.to_dict() for row in self._list(entity, payload)]}

        if action == 'create':
            missing = [f for f in required if payload.get(f) in (None, '')]
            if missing:
                raise ValidationError(f"Missing required fields: {', '.join(missing)}")
            row = model(**{f: _coerce(model, f, payload[f]) for f in fields if f in payload})
            db.session.add(row)
            db.session.commit()
            logger.info(f"{label} {row.id} created")
            return {'message': f"{label} created", 'id': row.id}

        row = self._get(model, label, payload.get('id'))
        if action == 'update':
            writable = UPDATE_ONLY.get(entity, fields)
            for f in writable:
                if f in payload:
                    setattr(row, f, _coerce(model, f, payload[f]))
            db.session.commit()
            logger.info(f"{label} {row.id} updated")
            return {'message': f"{label} updated"}

        db.session.delete(row)
        db.session.commit()
        logger.info(f"{label} {row.id} deleted")
        return {'message': f"{label} deleted"}

    @staticmethod
    def _get(model, label: str, row_id):
        if not row_id:
            raise ValidationError(f"{label} ID required")
        try:
            row = db.session.get(model, int(row_id))
        except (TypeError, ValueError):
            raise ValidationError(f"{label} ID required")
        if row is None:
            raise NotFound(f"{label} not found")
        return row

    @staticmethod
    def _list(entity: str, payload: dict):
        if entity == 'categories':
            return Category.query.order_by(Category.display_order, Category.id).all()
        if entity == 'products':
            return Product.query.order_by(Product.category_id, Product.display_order, Product.id).all()
        if entity == 'product_images':
            product_id = _parent_id(payload, 'product_id', "Product")
            return (
                ProductImage.query
                .filter_by(product_id=product_id)
                .order_by(ProductImage.is_primary.desc(), ProductImage.display_order)
                .all()
            )
        if entity == 'bales':
            return Bale.query.order_by(Bale.display_order, Bale.id).all()
        if entity == 'product_categories':
            return ProductCategory.query.order_by(ProductCategory.name, ProductCategory.id).all()
        if entity == 'bale_items':
            bale_id = _parent_id(payload, 'bale_id', "Bale")
            return BaleItem.query.filter_by(bale_id=bale_id).order_by(BaleItem.id).all()
        return StockItem.query.order_by(StockItem.name, StockItem.id).all()

