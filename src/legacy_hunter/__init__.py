"""Legacy Hunter - find legacy JavaScript that Baseline browsers do not need."""

__version__ = "0.1.0"
