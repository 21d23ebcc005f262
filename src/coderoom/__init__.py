"""
coderoom — collaborative code rooms with sandboxed execution.

- rooms:   session directory, language state and the WebSocket event relay
- sandbox: isolated, time-bounded execution of submitted source
- client:  reference participant (buffer + room client)
- cli:     ``coderoom`` command
"""

__version__ = "0.1.0"
