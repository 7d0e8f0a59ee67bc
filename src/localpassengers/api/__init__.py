"""HTTP API surface: the root router and shared dependencies."""
