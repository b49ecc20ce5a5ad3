"""environment — Runtime configuration and preset data."""
