"""HTTP surface for the donation split service."""
