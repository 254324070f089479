"""Transport implementations of the compute session port."""
