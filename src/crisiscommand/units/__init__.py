"""Emergency response units (patrol cars, ambulances, fire trucks)."""
