"""Infrastructure layer - pagination, waiters, logging and adapters."""
