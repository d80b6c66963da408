"""Core: pure domain logic with no I/O (errors, enums, billing math, prompts)."""
