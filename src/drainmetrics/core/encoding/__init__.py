"""Wire encoders for metric records."""
