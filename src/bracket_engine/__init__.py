"""Double elimination bracket engine: templates, seeding, byes and advancement."""
