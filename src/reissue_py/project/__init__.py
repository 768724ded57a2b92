"""Project file handling: the version file and atomic writes."""
