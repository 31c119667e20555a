"""Web server: FastAPI REST endpoints plus the Socket.IO sync channel."""
