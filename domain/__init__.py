# domain -- access rules, error taxonomy and repository contracts (no I/O)
