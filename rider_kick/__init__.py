"""RiderKick -- clean-architecture code generators for Rails applications."""

__version__ = "0.4.0"
