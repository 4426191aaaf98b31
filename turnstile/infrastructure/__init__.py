"""Infrastructure adapters implementing the domain protocols."""
