"""Municipal Incident Hub - citizen incident reporting backend."""

__version__ = "0.1.0"
