"""Commons package - settings, telemetry and infrastructure providers."""
