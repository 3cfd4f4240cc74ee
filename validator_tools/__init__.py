"""validator-tools - verify and mass-generate validator deposit and exit messages."""
