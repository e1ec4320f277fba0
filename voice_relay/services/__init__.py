"""Response generation services."""
