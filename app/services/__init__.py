"""Service layer: repositories, lifecycle rules and external clients."""
