"""Client side of the Trip Planner: API client, dashboard store, auth, forms."""
