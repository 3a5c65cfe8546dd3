"""Gmail access and message parsing."""
