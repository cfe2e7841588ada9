"""Reports module: task selection, metric calculators and output formatters."""
