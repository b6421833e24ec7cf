"""HTTP routers for uploads, jobs and health endpoints."""
