"""Bearer-token authentication for planmyday."""
