"""SQLAlchemy ORM models.

Models represent database tables:
- stock_items: Physical units in inventory (lifecycle state, sale link, promo flag)
- installment_rules: Card surcharge per brand/installments/channel
- plan_canje_values: Trade-in valuation bands
- installment_quotes: Saved calculator snapshots
"""

from app.models.stock_item import StockItem
from app.models.installment_rule import InstallmentRule
from app.models.plan_canje import PlanCanjeValue
from app.models.installment_quote import InstallmentQuote

__all__ = ["StockItem", "InstallmentRule", "PlanCanjeValue", "InstallmentQuote"]
