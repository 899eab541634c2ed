"""HTTP gateway serving files from a remote SFTP server."""

__version__ = "1.0.0"
