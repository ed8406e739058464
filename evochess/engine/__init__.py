"""Runtime plumbing shared by the evolution systems."""
