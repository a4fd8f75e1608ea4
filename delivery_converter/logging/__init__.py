"""Console logging setup and the JSON Lines error log."""
