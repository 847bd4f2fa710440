"""Infrastructure adapters (database, outbound HTTP)."""
