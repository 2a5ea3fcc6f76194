"""
Orders app.

Order lifecycle (role-gated status transitions with cancellation and
delivery side effects) and vendor settlement.
"""
