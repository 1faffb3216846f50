"""Rate lock service: time-boxed exchange-rate commitments per user and currency pair."""
