"""Database layer for planmyday."""
