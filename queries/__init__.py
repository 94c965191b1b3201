"""GA4 Data API queries, one module per report section."""
