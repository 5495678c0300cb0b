"""Read-only HTTP API over the campaign read model."""
