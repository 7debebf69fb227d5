"""Domain rules for matching installed content against registry records."""
