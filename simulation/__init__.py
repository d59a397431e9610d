"""Market simulation engine: prices, ledgers, events, ranking and scheduling."""
