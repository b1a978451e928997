"""Command implementations behind the orgraph CLI; each ``run_*`` returns an exit code."""
