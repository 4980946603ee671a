"""
Rentals module: rental records linking a customer to a car.

Rentals are written by fleet operations; this package exposes the read
helpers the customer lifecycle guard depends on.
"""
