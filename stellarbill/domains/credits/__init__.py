"""Credit ledger domain: append-only credit transactions and derived balances."""
