"""RoboAudit - an API for managing LLM usage audits."""

__version__ = "1.0.0"
