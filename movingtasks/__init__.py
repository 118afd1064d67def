"""Task tracking for a household move: filtering, item totals and lifecycle rules."""
