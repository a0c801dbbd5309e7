"""playwright-bridge: drive a Patchright browser session over line-delimited JSON."""
