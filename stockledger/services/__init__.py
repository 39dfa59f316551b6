from stockledger.services.batch_service import create_batch, list_batches
from stockledger.services.fifo_allocator import allocate_stock_out, plan_allocation
from stockledger.services.ledger_replay import replay_ledger
from stockledger.services.valuation_service import valuate

__all__ = [
    "allocate_stock_out",
    "create_batch",
    "list_batches",
    "plan_allocation",
    "replay_ledger",
    "valuate",
]
