"""Plan validation: checks, registry and orchestrator."""
