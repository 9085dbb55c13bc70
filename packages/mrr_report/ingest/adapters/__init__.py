"""CSV adapters producing raw MRR delta records."""
