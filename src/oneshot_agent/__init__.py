"""oneshot-agent: a conversational agent that executes smart-contract methods through 1Shot API."""

__version__ = "0.2.0"
