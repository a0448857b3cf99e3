"""HTTP framework adapters for log-drain ingestion."""
