import importlib

from stockledger.models.category import Category
from stockledger.models.item import Item, ItemDetails
from stockledger.models.stock_batch import StockBatch
from stockledger.models.stock_out import StockOutTransaction
from stockledger.models.user import User


def import_all_models() -> None:
    for module_name in (
        "stockledger.models.category",
        "stockledger.models.item",
        "stockledger.models.stock_batch",
        "stockledger.models.stock_out",
        "stockledger.models.user",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Category",
    "Item",
    "ItemDetails",
    "StockBatch",
    "StockOutTransaction",
    "User",
    "import_all_models",
]
