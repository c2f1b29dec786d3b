"""HTTP API for the pricing pipeline."""
