"""Runtime ownership: configuration, logging, error policy and hosting."""
