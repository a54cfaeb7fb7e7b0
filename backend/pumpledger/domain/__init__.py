"""Domain contracts and shared types."""

from backend.pumpledger.domain.contracts import (  # noqa: F401
    AccountBalanceContract,
    BalanceAsOfContract,
    LedgerEntryContract,
    LedgerEventContract,
    LedgerResultContract,
    RecordWarningContract,
    StatementRowContract,
    SummaryContract,
)
