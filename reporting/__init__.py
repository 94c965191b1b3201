"""Configuration, records and the market report builder."""
