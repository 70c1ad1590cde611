"""Plan checks, one subpackage per check family."""
