"""Task persistence services."""
