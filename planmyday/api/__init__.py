"""HTTP API for planmyday."""
