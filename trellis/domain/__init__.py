"""Domain layer: pure models, conventions and validation rules."""
