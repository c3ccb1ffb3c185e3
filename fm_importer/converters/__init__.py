"""Document converters and graph summaries."""
