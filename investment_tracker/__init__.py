"""Investment Tracker: a small RPC-style API for recording stock purchases."""

__version__ = "1.0.0"
