"""XIV Helper: multilingual item search and crafting trees."""
