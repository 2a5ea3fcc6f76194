"""
Returns app.

Return requests against delivered orders and the refunds that credit the
customer's wallet and debit the responsible vendor.
"""
