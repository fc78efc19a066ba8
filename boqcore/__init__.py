"""boqcore — catalog approval and BOQ versioning service."""
