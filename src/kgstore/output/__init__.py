"""Rich/JSON rendering of ServiceResult for the CLI."""
