"""HTTP routers for the backend API."""
