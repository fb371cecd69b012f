"""Live status proxy that reveals a gift card code when a stream stays offline."""
