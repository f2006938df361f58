"""Domain layer - enums and value objects shared by the engine."""
