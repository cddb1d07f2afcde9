"""xcforge command line interface."""
