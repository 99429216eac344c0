"""GupAI - chat assistant core with a pluggable completion backend."""

__version__ = "1.0.0"
