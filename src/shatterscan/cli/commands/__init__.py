"""ShatterScan CLI subcommands."""
