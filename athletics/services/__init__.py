from athletics.services.claims import ClaimProtocol
from athletics.services.delivery import DeliveryOutcome
from athletics.services.ledger import ClaimKey, LedgerEntry, LedgerStore, SqlLedgerStore

__all__ = ["ClaimProtocol", "DeliveryOutcome", "ClaimKey", "LedgerEntry", "LedgerStore", "SqlLedgerStore"]
