"""Bus route finder: nearest stops and journey lengths over OSRM with a haversine fallback."""
