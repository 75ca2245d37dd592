from finance_tracker.models.category import CategoryModel
from finance_tracker.models.receipt import ReceiptModel
from finance_tracker.models.transaction import TransactionModel

__all__ = ["CategoryModel", "ReceiptModel", "TransactionModel"]
