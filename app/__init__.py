"""Reference key/value ledger service for the deal room client."""
