"""Address geocoding for the map view."""
