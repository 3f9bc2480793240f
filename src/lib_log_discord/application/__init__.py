"""Application layer: ports and the delivery use cases."""
