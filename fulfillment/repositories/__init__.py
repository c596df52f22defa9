"""Repositories — in-memory lookup of purchases (and their workflows) by id."""

from fulfillment.repositories.purchase import PurchaseRepository

__all__ = ["PurchaseRepository"]
