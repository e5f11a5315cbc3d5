"""Array utilities."""
