"""OLW learning platform API."""
