"""
Customers module.

Scope:
- Customer lifecycle (create / update / delete with guards, detail, search)
- JSON API under /customers
"""
