"""Integer-only math helpers for Numbers contracts."""
