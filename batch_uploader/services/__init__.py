"""Services that make up the batch upload pipeline."""
