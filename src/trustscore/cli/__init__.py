"""Command-line interface for trustscore."""
