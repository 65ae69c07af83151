"""termrelay -- Session-managed remote command execution client.

This package relays command strings to a remote execution server over
HTTP+JSON. The client owns a server-issued terminal session, validates
it before each command and transparently renews it when the server
stops accepting it.
"""

__version__ = "0.1.0"
