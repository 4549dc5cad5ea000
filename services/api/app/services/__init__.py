"""Business logic services.

Services contain all business rules and are called by routes:
- lifecycle / stock_errors: stock lifecycle guard and error classification
- rules / pricing / valuation: pure pricing and trade-in engines
- stock: guarded dispatch of stock mutations to the record store
- fx: dollar rate lookup
"""
