"""Labor task and payout tracker."""

__version__ = "0.1.0"
