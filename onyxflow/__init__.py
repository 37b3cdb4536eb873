"""OnyxFlow - client/project state management for a studio dashboard."""

__version__ = "0.1.0"
