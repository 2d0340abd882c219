"""Land-base facility model: damage-driven capacity, air-unit hosting, and supply depots."""
