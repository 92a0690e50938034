"""Mock stock analytics and a simulated brokerage ledger."""
