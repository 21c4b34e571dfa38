# errors.py
"""
Error kinds recognized by the simulation core.

Neither error is retried or recovered from inside the core; recovery
policy (e.g. falling back to the sequential solver) lives with the caller.
"""


class DeviceUnavailable(RuntimeError):
    """The parallel-batch strategy could not be initialized."""


class InvalidConfiguration(ValueError):
    """A configuration value lies outside its physically meaningful range."""
