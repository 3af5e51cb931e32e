"""Business operations shared by the HTTP routers."""
