"""costexplorer test suite."""
