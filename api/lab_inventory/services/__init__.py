# lab_inventory/services/__init__.py
"""
Business logic services for Lab Inventory.
"""
from lab_inventory.services.catalog import CatalogService
from lab_inventory.services.ledger import StockLedger
from lab_inventory.services.reconciler import ImportReconciler

__all__ = [
    "CatalogService",
    "StockLedger",
    "ImportReconciler",
]
