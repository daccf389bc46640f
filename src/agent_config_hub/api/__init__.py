"""HTTP routers for Agent Config Hub."""
