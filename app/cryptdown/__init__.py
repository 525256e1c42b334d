"""cryptdown - secure teardown and power-off for encrypted removable hosts."""

__version__ = "0.3.0"
