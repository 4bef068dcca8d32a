"""HTTP surface of NewsBrief: trigger, settings and health endpoints."""
