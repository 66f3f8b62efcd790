"""Rule-based bookkeeping classifier for bank statements and money diary entries."""

__version__ = "0.1.0"
