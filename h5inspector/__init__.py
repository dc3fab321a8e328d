"""Developer utility: demo model inspector, dataset viewer and LLM energy forecast."""

__version__ = "0.1.0"
