"""Domain services for balances, the ledger and earning claims."""
