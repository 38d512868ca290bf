"""
Tooling for a file-based package repository.

The repository is a directory holding an index.json marker and one
descriptor per package under packages/<id>/index.json. This package finds
the repository enclosing a path and upserts release targets into package
descriptors.
"""
