"""Qt integration: timer-driven clock ticks and signal re-emission."""
