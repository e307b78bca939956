"""CM Jewelry tooling."""
