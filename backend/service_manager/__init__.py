"""Personal Service Manager backend."""
