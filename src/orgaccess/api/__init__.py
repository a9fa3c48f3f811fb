"""HTTP surface for the access-control core."""
