"""Agent Config Hub - import and sync pipeline for Auto-Claude configuration."""

__version__ = "0.1.0"
