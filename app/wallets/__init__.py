"""
Wallets app: vendor settlement wallets and customer personal wallets.

All balance changes go through wallets.services:
    VendorWalletService - credit, credit_pending, release_pending, debit,
                          debit_pending_or_balance, withdrawals
    CustomerWalletService - credit, debit
"""
