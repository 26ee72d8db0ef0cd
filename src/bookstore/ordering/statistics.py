"""Read-only sales statistics over the ledger's orders.

Only CONFIRMED and SHIPPED orders count. Category sales group by the
category recorded in each order line, not the item's current category.
"""

from collections import Counter


def total_revenue(ledger):
    return sum(order.total_amount for order in ledger.orders() if order.counts_as_revenue())


def category_sales(ledger):
    sales = Counter()
    for order in ledger.orders():
        if not order.counts_as_revenue():
            continue
        for snapshot in order.items:
            sales[snapshot.category_at_purchase or ""] += snapshot.quantity
    return dict(sales)


def top_sellers(ledger, limit=5):
    return ledger.top_n(limit)


def order_count(ledger):
    return len(ledger.orders())
