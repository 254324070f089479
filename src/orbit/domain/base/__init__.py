"""Domain base layer - exceptions, ports and shared value types."""
