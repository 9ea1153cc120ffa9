"""Deploy, seed and smoke-test the prediction contract."""

__version__ = "0.2.0"
