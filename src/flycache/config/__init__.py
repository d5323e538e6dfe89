"""FlyCache configuration properties."""
