"""Pure domain layer: clock, commands, results."""
