"""Task lifecycle module: state machine, history ledger and assignment rules."""
