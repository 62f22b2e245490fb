"""Session-aware operations built on the analytics functions."""
