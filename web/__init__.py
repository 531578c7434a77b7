"""HTTP adapter for the tcsim trace generators."""
