"""Domain services composed on top of the API client."""
